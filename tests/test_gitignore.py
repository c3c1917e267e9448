import pytest
from pydantic import ValidationError

from walkrepo.errors import NotARuleFileError, RuleFileReadError
from walkrepo.gitignore import (
    compile_pattern,
    explain,
    is_excluded,
    parse_rule_file,
    parse_rule_lines,
)


# --- Compiling lines ---

@pytest.mark.parametrize("line", ["", "   ", "# a comment", "#*.txt", "!", "/"])
def test_blank_comment_and_empty_lines_are_skipped(line):
    assert compile_pattern(line) is None


def test_plain_name_floats():
    p = compile_pattern("*.txt")
    assert p.segments == ("*.txt",)
    assert not p.anchored
    assert not p.negated
    assert not p.directory_only


def test_prefixes_and_suffixes_are_consumed():
    p = compile_pattern("!/build/")
    assert p.negated
    assert p.anchored
    assert p.directory_only
    assert p.segments == ("build",)


def test_internal_slash_anchors_pattern():
    p = compile_pattern("doc/**/*.md")
    assert p.anchored
    assert p.segments == ("doc", "**", "*.md")


def test_trailing_spaces_and_carriage_return_are_dropped():
    p = compile_pattern("foo.txt   \r")
    assert p.segments == ("foo.txt",)
    assert p.raw == "foo.txt   "


def test_domain_is_recorded():
    p = compile_pattern("*.log", ("a", "b"))
    assert p.domain == ("a", "b")


def test_pattern_is_immutable():
    p = compile_pattern("*.log")
    with pytest.raises(ValidationError):
        p.negated = True


# --- Matching single patterns ---

def test_floating_pattern_matches_at_any_depth():
    p = compile_pattern("*.txt")
    assert p.matches(("a.txt",), False)
    assert p.matches(("sub", "deep", "a.txt"), False)
    assert not p.matches(("a.log",), False)


def test_anchored_pattern_matches_only_at_domain_root():
    p = compile_pattern("/foo")
    assert p.matches(("foo",), False)
    assert not p.matches(("sub", "foo"), False)


def test_pattern_only_matches_inside_its_domain():
    p = compile_pattern("*.txt", ("sub",))
    assert p.matches(("sub", "a.txt"), False)
    assert p.matches(("sub", "x", "a.txt"), False)
    assert not p.matches(("a.txt",), False)
    assert not p.matches(("other", "a.txt"), False)
    # the domain directory itself is never matched by its own rules
    assert not p.matches(("sub",), True)


def test_directory_only_pattern():
    p = compile_pattern("build/")
    assert p.matches(("build",), True)
    assert p.matches(("src", "build"), True)
    assert not p.matches(("build",), False)


def test_directory_pattern_does_not_match_files_beneath_it():
    p = compile_pattern("build/")
    assert not p.matches(("build", "x.txt"), False)
    assert not p.matches(("build", "sub"), True)

    plain = compile_pattern("sub")
    assert plain.matches(("sub",), True)
    assert not plain.matches(("sub", "a.txt"), False)


def test_trailing_double_star_matches_everything_below():
    p = compile_pattern("foo/**")
    assert p.matches(("foo", "a", "b"), False)
    assert not p.matches(("foo",), False)


def test_double_star_matches_any_number_of_directories():
    p = compile_pattern("doc/**/*.md")
    assert p.matches(("doc", "foo.md"), False)
    assert p.matches(("doc", "bar", "baz.md"), False)
    assert not p.matches(("doc", "bar"), True)
    assert not p.matches(("src", "doc", "foo.md"), False)


def test_single_star_does_not_match_the_directory_itself():
    p = compile_pattern("build/*")
    assert not p.matches(("build",), True)
    assert p.matches(("build", "output.txt"), False)
    assert p.matches(("build", "logs"), True)


def test_question_mark_and_bracket_classes():
    q = compile_pattern("file?.txt")
    assert q.matches(("file1.txt",), False)
    assert not q.matches(("file10.txt",), False)

    b = compile_pattern("[ab].log")
    assert b.matches(("a.log",), False)
    assert not b.matches(("c.log",), False)


def test_escaped_hash_is_not_a_comment():
    p = compile_pattern("\\#notes")
    assert p is not None
    assert p.matches(("#notes",), False)


def test_malformed_glob_falls_back_to_literal_match():
    p = compile_pattern("[z-a].txt")
    assert p is not None
    assert p.matches(("[z-a].txt",), False)
    assert not p.matches(("b.txt",), False)
    assert not p.matches(("[z-a].txt", "inner"), False)


def test_malformed_directory_glob_falls_back_to_literal_directory_match():
    p = compile_pattern("[z-a]/")
    assert p.matches(("[z-a]",), True)
    assert not p.matches(("[z-a]",), False)
    assert not p.matches(("[z-a]", "x"), False)


# --- Pattern sets ---

def test_last_match_wins():
    patterns = parse_rule_lines("*.txt\n!file1.txt")
    assert not is_excluded(patterns, ("file1.txt",), False)
    assert is_excluded(patterns, ("file2.txt",), False)


def test_order_is_load_bearing():
    patterns = parse_rule_lines("!file1.txt\n*.txt")
    assert is_excluded(patterns, ("file1.txt",), False)


def test_negated_directory_does_not_reinclude_its_files():
    patterns = parse_rule_lines("*.txt\n!sub")
    assert not is_excluded(patterns, ("sub",), True)
    assert is_excluded(patterns, ("sub", "a.txt"), False)


def test_whitelist_idiom():
    patterns = parse_rule_lines("*\n!*/\n!*.py")
    assert not is_excluded(patterns, ("src",), True)
    assert not is_excluded(patterns, ("src", "a.py"), False)
    assert is_excluded(patterns, ("src", "notes.txt"), False)
    assert is_excluded(patterns, ("README",), False)


def test_no_match_means_not_excluded():
    assert not is_excluded(parse_rule_lines("*.log"), ("a.txt",), False)
    assert not is_excluded([], ("a.txt",), False)


def test_deeper_negation_overrides_shallower_exclusion():
    patterns = parse_rule_lines("*.log") + parse_rule_lines("!error.log", ("logs",))
    assert not is_excluded(patterns, ("logs", "error.log"), False)
    assert is_excluded(patterns, ("logs", "debug.log"), False)
    assert is_excluded(patterns, ("error.log",), False)


def test_explain_returns_deciding_pattern():
    patterns = parse_rule_lines("*.txt\n!file1.txt\n# trailing comment\n")
    assert explain(patterns, ("file1.txt",), False).raw == "!file1.txt"
    assert explain(patterns, ("file2.txt",), False).raw == "*.txt"
    assert explain(patterns, ("file2.log",), False) is None


# --- Rule files ---

def test_parse_rule_file_scopes_patterns(tmp_path):
    rule_file = tmp_path / ".gitignore"
    rule_file.write_text("# build output\n*.o\n\n!keep.o\n", encoding="utf-8")

    patterns = parse_rule_file(rule_file, ("src",))

    assert [p.raw for p in patterns] == ["*.o", "!keep.o"]
    assert all(p.domain == ("src",) for p in patterns)
    assert all(p.source == str(rule_file) for p in patterns)


def test_parse_rule_file_rejects_other_files(tmp_path):
    other = tmp_path / "notes.txt"
    other.write_text("*.txt", encoding="utf-8")
    with pytest.raises(NotARuleFileError):
        parse_rule_file(other)


def test_parse_rule_file_accepts_configured_names(tmp_path):
    other = tmp_path / ".ignore"
    other.write_text("*.txt", encoding="utf-8")
    assert len(parse_rule_file(other, rule_files=(".gitignore", ".ignore"))) == 1


def test_parse_rule_file_read_error_names_path(tmp_path):
    missing = tmp_path / "nowhere" / ".gitignore"
    with pytest.raises(RuleFileReadError) as excinfo:
        parse_rule_file(missing)
    assert excinfo.value.path == missing
    assert isinstance(excinfo.value.__cause__, OSError)
