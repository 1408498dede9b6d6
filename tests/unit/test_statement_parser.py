import pytest
from nut.PARSERS.statement_parser import StatementParser
from nut.MODELS.statement import Directive
from nut.exceptions import ScriptReadError, UnterminatedContinuationError, UnknownDirectiveError

SCRIPT = """# base image
FROM ubuntu:22.04
MAINTAINER Jane Doe <jane@example.com>

ENV A=1 B 2
RUN apt-get update && \\
    apt-get install -y \\
    curl
WORKDIR /srv
CMD ["run", "--fast"]
"""


def test_parse_from_string():
    parser = StatementParser()
    statements = parser.parse_from_string(SCRIPT)

    assert [s.directive for s in statements] == [
        Directive.FROM, Directive.MAINTAINER, Directive.ENV,
        Directive.RUN, Directive.WORKDIR, Directive.CMD,
    ]
    assert statements[0].arguments == ["ubuntu:22.04"]
    assert statements[2].arguments == ["A=1", "B", "2"]

    # Check CMD parsing (exec form)
    assert statements[5].arguments == ["run", "--fast"]

    # Check RUN with line continuation
    run = statements[3]
    assert run.arguments == ["apt-get", "update", "&&", "apt-get", "install", "-y", "curl"]
    assert run.line == 6


def test_comment_inside_continuation_is_dropped():
    content = "RUN echo a \\\n# not part of the command\n  && echo b\n"
    statements = StatementParser().parse_from_string(content)
    assert len(statements) == 1
    assert statements[0].arguments == ["echo", "a", "&&", "echo", "b"]


def test_blank_line_does_not_end_continuation():
    content = "RUN echo a \\\n\n   \necho b\n"
    statements = StatementParser().parse_from_string(content)
    assert len(statements) == 1
    assert statements[0].arguments == ["echo", "a", "echo", "b"]


def test_continuation_then_comment_still_needs_terminator():
    content = "RUN echo a \\\n# comment\n"
    with pytest.raises(UnterminatedContinuationError):
        StatementParser().parse_from_string(content)


def test_indented_hash_is_not_a_comment():
    with pytest.raises(UnknownDirectiveError):
        StatementParser().parse_from_string("  # indented\n")


def test_unknown_directive():
    with pytest.raises(UnknownDirectiveError) as exc:
        StatementParser().parse_from_string("FROM base\nFROMM base\n")
    assert exc.value.keyword == "FROMM"
    assert exc.value.line == 2


def test_keywords_are_case_insensitive():
    statements = StatementParser().parse_from_string("from base\nrun ls\n")
    assert [s.directive for s in statements] == [Directive.FROM, Directive.RUN]


def test_shell_form_brackets_are_kept_when_not_json():
    statements = StatementParser().parse_from_string("CMD [not json]\n")
    assert statements[0].arguments == ["[not", "json]"]


def test_parse_is_idempotent():
    parser = StatementParser()
    assert parser.parse_from_string(SCRIPT) == parser.parse_from_string(SCRIPT)


def test_parse_file(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_text(SCRIPT)
    statements = StatementParser().parse(str(path))
    assert len(statements) == 6


def test_parse_missing_file(tmp_path):
    with pytest.raises(ScriptReadError):
        StatementParser().parse(str(tmp_path / "missing"))


def test_statements_are_immutable():
    statement = StatementParser().parse_from_string("USER app\n")[0]
    with pytest.raises(Exception):
        statement.arguments = ["root"]


def test_parse_undecodable_file(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_bytes(b"FROM base\nRUN echo \xff\n")
    with pytest.raises(ScriptReadError):
        StatementParser().parse(str(path))


def test_only_newline_separates_lines():
    statements = StatementParser().parse_from_string("FROM base\nRUN printf 'a\x0cb'\n")
    assert [s.directive for s in statements] == [Directive.FROM, Directive.RUN]
    assert statements[1].raw == "RUN printf 'a\x0cb'"
    assert statements[1].line == 2


def test_carriage_returns_are_dropped():
    statements = StatementParser().parse_from_string("FROM base\r\nRUN echo a \\\r\n  echo b\r\n")
    assert statements[1].arguments == ["echo", "a", "echo", "b"]
