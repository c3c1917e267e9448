from walkrepo.errors import NotARuleFileError, RuleFileReadError, WalkIOError, WalkRepoError
from walkrepo.gitignore import Pattern, compile_pattern, explain, is_excluded, parse_rule_file
from walkrepo.models import EntryInfo, IgnoreStatus, WalkOptions
from walkrepo.walker import WalkAction, ignore_status, walk_repo
