"""Handles interactive mode for the lox interpreter. Uses cmd as backend."""

import cmd

from lox.core.lexical import Lexer
from lox.core.tokens import TokenType


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "lox :: Python tree-walking interpreter\nType 'help' for more information, 'exit' or Ctrl-D to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def is_complete(source):
        """An input unit is complete once every '{' token has been closed. Braces inside strings and comments are
        not tokens, so they never hold the shell open.
        """
        types = [token.type for token in Lexer(source).scan_tokens()]
        return types.count(TokenType.LEFT_BRACE) <= types.count(TokenType.RIGHT_BRACE)

    def parseline(self, line):
        """cmd treats a leading '!' as a shell escape; in lox it is logical not."""
        if line.lstrip().startswith("!"):
            return None, None, line.strip()
        return super().parseline(line)

    def default(self, line):
        """Executes arbitrary lox source. Lines are buffered until braces balance."""
        source = self._tmp_line + line + "\n"

        if not Shell.is_complete(source):
            self._tmp_line = source
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        self.sess.reset()
        self.sess.run(source)

    def do_help(self, arg):
        """Doesn't return docs, but rather a short intro."""
        if arg or self._tmp_line:
            return self.default(f"help {arg}")

        print("Welcome to the lox interpreter!\n\n"
              "Type statements and they are run immediately; variables, functions and classes you \n"
              "declare stay defined for the rest of the session. Blocks may span several lines: \n"
              "input is held until every '{' is closed.\n\n"
              "Try it out by typing 'fun greet(name) { print \"hi \" + name; }', then \n"
              "'greet(\"lox\");'.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter. "exit" and "exit;" both quit."""
        if self._tmp_line or arg.strip() not in ("", ";"):
            # e.g. "exit = 1;" is lox, not a shell command
            return self.default(f"exit {arg}")
        return True
