#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import List, Optional

from pigeon_analysis import AnalysisResult
from pigeon_analyzer import SemanticAnalyzer
from pigeon_ast_printer import format_program
from pigeon_builtins import Builtins
from pigeon_context import InterpreterContext
from pigeon_declarator import FunctionDeclarator
from pigeon_diagnostics import Diagnostic, DiagnosticKind, diag_from_token
from pigeon_evaluator import Evaluator
from pigeon_internal_error import EvaluationError, IllegalUsageError, InternalInterpreterError
from pigeon_lexer import Lexer, LexerError
from pigeon_logger import log_error, log_info, log_debug, log_stage
from pigeon_parser import Parser, ParseError


class Interpreter:
    """
    Front door for running Pigeon source:

      1. tokenize and parse (a syntax error stops the pipeline)
      2. install the host's natives into a fresh Global Scope
      3. pre-declare all top-level functions
      4. run the semantic analyzer

    Construction never raises for user mistakes; inspect `diagnostics` or
    `has_no_errors()` and call `evaluate()` only for a clean program.
    """

    def __init__(
        self,
        source: str,
        builtins: Optional[Builtins] = None,
        *,
        filename: Optional[str] = None,
        context: Optional[InterpreterContext] = None,
    ):
        self.source = source
        self.filename = filename
        self.context = context or InterpreterContext.default()
        self.analysis = AnalysisResult(context=self.context)
        self._builtins = builtins or Builtins()
        self._analyze()

    # --- Public API ---

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.analysis.diagnostics

    def has_no_errors(self) -> bool:
        return not self.analysis.has_errors()

    def evaluate(self) -> None:
        """
        Run the program. Raises IllegalUsageError when diagnostics exist.

        May be called repeatedly; native variables start every run from their
        registered initial values.
        """
        if self.analysis.has_errors():
            raise IllegalUsageError(
                f"cannot evaluate a program with {len(self.diagnostics)} error(s); check has_no_errors() first")
        log_stage(self.context, "Evaluating", self.filename)
        self._builtins.reset(self.analysis.global_scope)
        try:
            Evaluator(self.analysis).run()
        except (EvaluationError, InternalInterpreterError) as e:
            log_error(self.context, e.format())
            raise

    def format_errors(self) -> str:
        return "\n".join(d.format() for d in self.diagnostics)

    def format_tree(self) -> str:
        if self.analysis.program is None:
            return ""
        return format_program(self.analysis.program)

    # --- Pipeline ---

    def _analyze(self) -> None:
        result = self.analysis

        log_stage(self.context, "Parsing", self.filename)
        try:
            tokens = Lexer(self.source, self.filename or "<input>").tokenize()
            log_debug(self.context, f"Lexed {len(tokens)} token(s)")
            result.program = Parser(tokens, self.filename).parse_program()
        except LexerError as e:
            result.diagnostics.append(Diagnostic(
                kind=DiagnosticKind.SYNTAX,
                message=e.message,
                filename=self.filename,
                line=e.line,
                column=e.column,
            ))
            return
        except ParseError as e:
            result.diagnostics.append(
                diag_from_token(DiagnosticKind.SYNTAX, e.message, filename=self.filename, token=e.token))
            return
        log_debug(self.context, f"Parsed {len(result.program.items)} top-level item(s)")

        log_stage(self.context, "Registering natives")
        self._builtins.register(result.global_scope)
        log_debug(self.context, f"Registered {len(self._builtins.names)} native(s)")

        log_stage(self.context, "Declaring functions")
        declarator = FunctionDeclarator(result.global_scope, self.filename)
        declarator.declare(result.program)
        result.diagnostics.extend(declarator.diagnostics)

        log_stage(self.context, "Analyzing")
        SemanticAnalyzer(result).check()

        log_info(self.context, f"Analysis complete: {len(result.diagnostics)} error(s)")
