"""
Parser for build scripts, turning raw lines into logical statements.
"""
import re
import json
import logging
from typing import List, Optional, Tuple
from ..MODELS.statement import Directive, Statement
from ..exceptions import ScriptReadError, UnterminatedContinuationError, UnknownDirectiveError

logger = logging.getLogger(__name__)

COMMENT = re.compile(r'^#')
CONTINUATION = re.compile(r'\\$')

# Directives whose arguments may be written as a JSON array (exec form).
EXEC_FORM_DIRECTIVES = {Directive.RUN, Directive.CMD, Directive.ENTRYPOINT}


class StatementParser:
    """
    Parser for build script statements.
    """
    def parse(self, script_path: str) -> List[Statement]:
        """
        Parses a build script from a file path.

        Args:
            script_path (str): Path to the build script.

        Returns:
            List[Statement]: Statements in file order.
        """
        try:
            with open(script_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ScriptReadError(f"Failed to read build script {script_path}: {e}") from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> List[Statement]:
        """
        Parses a build script from a string.

        Comment lines are dropped even in the middle of a continuation, and
        blank lines do not end one.

        Args:
            content (str): Content of the build script.

        Returns:
            List[Statement]: Statements in file order.
        """
        statements = []
        pending: Optional[Tuple[int, str]] = None

        for number, line in enumerate(content.split('\n'), start=1):
            line = line.rstrip('\r')
            if COMMENT.match(line):
                logger.debug("Comment. bypassing")
                continue
            if CONTINUATION.search(line):
                logger.debug("Part of a multiline statement")
                part = line.rstrip('\\')
                if pending:
                    pending = (pending[0], pending[1] + " " + part)
                else:
                    pending = (number, part)
                continue
            if not line.strip():
                logger.debug("Empty line. bypassing")
                continue

            if pending:
                start, text = pending[0], pending[1] + " " + line
                pending = None
            else:
                start, text = number, line
            statement = self._make_statement(text, start)
            if statement is not None:
                statements.append(statement)

        if pending:
            raise UnterminatedContinuationError(
                f"Line {pending[0]} continues past the end of the script: {pending[1].strip()}"
            )
        return statements

    def _make_statement(self, text: str, line: int) -> Optional[Statement]:
        words = text.split()
        if not words:
            # A continuation made only of backslashes and whitespace.
            return None
        keyword = words[0]
        try:
            directive = Directive(keyword.upper())
        except ValueError:
            raise UnknownDirectiveError(keyword, line) from None

        args = words[1:]
        if directive in EXEC_FORM_DIRECTIVES:
            exec_args = self._exec_form(text.strip()[len(keyword):].strip())
            if exec_args is not None:
                args = exec_args

        return Statement(directive=directive, arguments=args, raw=text.strip(), line=line)

    @staticmethod
    def _exec_form(args_str: str) -> Optional[List[str]]:
        """Decodes ``["a", "b"]`` argument lists; returns None for shell form."""
        if not (args_str.startswith('[') and args_str.endswith(']')):
            return None
        try:
            args = json.loads(args_str)
        except json.JSONDecodeError:
            return None
        if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
            return None
        return args
