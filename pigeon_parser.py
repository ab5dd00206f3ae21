#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List, Optional, Union

from pigeon_ast import (
    Span, Param, FuncDecl, Program, Stmt, Block, VarDecl, AssignStmt, CallStmt, IfStmt, WhileStmt, DoWhileStmt,
    ForStmt, ReturnStmt, BreakStmt, ContinueStmt, Expr, IntLiteral, FloatLiteral, StringLiteral, BoolLiteral,
    VarRef, ParenExpr, UnaryOp, BinaryOp, TernaryOp, CallExpr)
from pigeon_lexer import TokenKind, Token, Lexer


# ==========================
# Parser
# ==========================

@dataclass
class ParseError(Exception):
    message: str
    token: Optional[Token] = None
    filename: Optional[str] = None


ASSIGNMENT_OPERATORS = (
    TokenKind.EQ,
    TokenKind.PLUS_EQ,
    TokenKind.MINUS_EQ,
    TokenKind.STAR_EQ,
    TokenKind.SLASH_EQ,
    TokenKind.MODULO_EQ,
)


class Parser:
    def __init__(self, tokens: List[Token], filename: Optional[str] = None) -> None:
        self.tokens = tokens
        self.index = 0
        self.filename = filename

    @classmethod
    def from_source(cls, source: str) -> "Parser":
        lexer = Lexer.from_source(source)
        tokens = lexer.tokenize()
        return cls(tokens)

    # --- token utilities ---

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_at(self, offset: int) -> Token:
        pos = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[pos]

    def _last(self) -> Token:
        return self.tokens[self.index - 1 if self.index > 0 else 0]

    def _at_end(self) -> bool:
        return self._peek().kind is TokenKind.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if not self._at_end():
            self.index += 1
        return tok

    def _check(self, kind: TokenKind) -> bool:
        return self._peek().kind is kind

    def _match(self, *kinds: TokenKind) -> bool:
        if self._peek().kind in kinds:
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind, msg: str) -> Token:
        if not self._check(kind):
            raise ParseError(f"{msg}, got {self._peek()} instead", self._peek(), self.filename)
        return self._advance()

    def _span_start(self) -> Span:
        here = self._peek()
        return Span(here.line, here.column, here.line, here.column)

    def _extend_span(self, start: Span) -> Span:
        here = self._last()
        return Span(
            start.start_line,
            start.start_column,
            here.line,
            here.column + len(here.text),
        )

    # --- entry point ---

    def parse_program(self, filename: Optional[str] = None) -> Program:
        # program := (funcDecl | stmt)* EOF

        if filename is not None:
            self.filename = filename

        start = self._span_start()
        items: List[Union[FuncDecl, Stmt]] = []
        while not self._at_end():
            if self._check(TokenKind.TYPE):
                items.append(self._parse_function())
            else:
                items.append(self._parse_stmt())

        return Program(items, span=self._extend_span(start), filename=self.filename)

    # --- top-level declarations ---

    def _parse_function(self) -> FuncDecl:
        start = self._span_start()
        ret_tok = self._expect(TokenKind.TYPE, "[PAR-0040] expected return type")
        name_tok = self._expect(TokenKind.IDENT, "[PAR-0041] expected function name")
        self._expect(TokenKind.LPAREN, "[PAR-0042] expected '(' after function name")
        params: List[Param] = []
        if not self._check(TokenKind.RPAREN):
            while True:
                param_start = self._span_start()
                param_type = self._expect(TokenKind.TYPE, "[PAR-0043] expected parameter type")
                param_name = self._expect(TokenKind.IDENT, "[PAR-0044] expected parameter name")
                params.append(Param(param_name.text, param_type.text, span=self._extend_span(param_start)))
                if not self._match(TokenKind.COMMA):
                    break
        self._expect(TokenKind.RPAREN, "[PAR-0045] expected ')' after parameters")

        body = self._parse_stmt_block()
        return FuncDecl(name_tok.text, params, ret_tok.text, body, span=self._extend_span(start))

    # --- blocks and statements ---

    def _parse_stmt_block(self) -> Block:
        # stmtBlock := '{' stmt* '}' | stmt
        start = self._span_start()
        if self._match(TokenKind.LBRACE):
            stmts: List[Stmt] = []
            while not self._check(TokenKind.RBRACE):
                if self._at_end():
                    raise ParseError("[PAR-0091] expected '}' after block", self._peek(), self.filename)
                stmts.append(self._parse_stmt())
            self._expect(TokenKind.RBRACE, "[PAR-0091] expected '}' after block")
            return Block(stmts, braced=True, span=self._extend_span(start))

        stmt = self._parse_stmt()
        return Block([stmt], braced=False, span=self._extend_span(start))

    def _parse_stmt(self) -> Stmt:
        tok = self._peek()
        if tok.kind in (TokenKind.LET, TokenKind.CONST):
            return self._parse_var_decl()
        if tok.kind is TokenKind.IF:
            return self._parse_if_stmt()
        if tok.kind is TokenKind.WHILE:
            return self._parse_while_stmt()
        if tok.kind is TokenKind.DO:
            return self._parse_do_while_stmt()
        if tok.kind is TokenKind.FOR:
            return self._parse_for_stmt()
        if tok.kind is TokenKind.BREAK:
            return self._parse_break_stmt()
        if tok.kind is TokenKind.CONTINUE:
            return self._parse_continue_stmt()
        if tok.kind is TokenKind.RETURN:
            return self._parse_return_stmt()
        if tok.kind is TokenKind.IDENT:
            return self._parse_ident_stmt()
        if tok.kind is TokenKind.LBRACE:
            raise ParseError("[PAR-0101] a block is only allowed as the body of a statement or function", tok,
                             self.filename)
        if tok.kind is TokenKind.TYPE:
            raise ParseError("[PAR-0102] function declarations are only allowed at top level", tok, self.filename)
        raise ParseError(f"[PAR-0100] unexpected token at start of statement: {tok}", tok, self.filename)

    def _parse_var_decl(self) -> VarDecl:
        start = self._span_start()
        keyword = self._advance()  # 'let' or 'const'
        name_tok = self._expect(TokenKind.IDENT, "[PAR-0110] expected variable name")
        self._expect(TokenKind.EQ, "[PAR-0111] expected '=' in variable declaration")
        value = self._parse_expr()
        self._expect(TokenKind.SEMI, "[PAR-0112] expected ';' after variable declaration")
        return VarDecl(name_tok.text, value, is_const=keyword.kind is TokenKind.CONST, span=self._extend_span(start))

    def _parse_ident_stmt(self) -> Stmt:
        # assignment or function call used as a statement
        start = self._span_start()
        if self._peek_at(1).kind is TokenKind.LPAREN:
            call = self._parse_call()
            self._expect(TokenKind.SEMI, "[PAR-0113] expected ';' after function call")
            return CallStmt(call, span=self._extend_span(start))

        name_tok = self._advance()
        if not self._match(*ASSIGNMENT_OPERATORS):
            raise ParseError(f"[PAR-0114] expected assignment operator or '(' after '{name_tok.text}', "
                             f"got {self._peek()} instead", self._peek(), self.filename)
        op_tok = self._last()
        value = self._parse_expr()
        self._expect(TokenKind.SEMI, "[PAR-0115] expected ';' after assignment")
        return AssignStmt(name_tok.text, op_tok.text, value, span=self._extend_span(start))

    def _parse_if_stmt(self) -> IfStmt:
        start = self._span_start()
        self._expect(TokenKind.IF, "[PAR-0120] expected 'if'")
        cond = self._parse_expr()
        then_block = self._parse_stmt_block()
        else_block: Optional[Block] = None
        if self._match(TokenKind.ELSE):
            else_block = self._parse_stmt_block()
        return IfStmt(cond, then_block, else_block, span=self._extend_span(start))

    def _parse_while_stmt(self) -> WhileStmt:
        start = self._span_start()
        self._expect(TokenKind.WHILE, "[PAR-0130] expected 'while'")
        cond = self._parse_expr()
        body = self._parse_stmt_block()
        return WhileStmt(cond, body, span=self._extend_span(start))

    def _parse_do_while_stmt(self) -> DoWhileStmt:
        start = self._span_start()
        self._expect(TokenKind.DO, "[PAR-0133] expected 'do'")
        body = self._parse_stmt_block()
        self._expect(TokenKind.WHILE, "[PAR-0134] expected 'while' after do-while body")
        cond = self._parse_expr()
        self._expect(TokenKind.SEMI, "[PAR-0135] expected ';' after do-while condition")
        return DoWhileStmt(body, cond, span=self._extend_span(start))

    def _parse_for_stmt(self) -> ForStmt:
        start = self._span_start()
        self._expect(TokenKind.FOR, "[PAR-0140] expected 'for'")
        counter = self._expect(TokenKind.IDENT, "[PAR-0141] expected loop counter name after 'for'")
        self._expect(TokenKind.EQ, "[PAR-0142] expected '=' after loop counter")
        start_expr = self._parse_expr()
        if not self._match(TokenKind.TO, TokenKind.DOWNTO):
            raise ParseError(f"[PAR-0143] expected 'to' or 'downto' in for loop, got {self._peek()} instead",
                             self._peek(), self.filename)
        direction = self._last().text
        bound = self._parse_expr()
        body = self._parse_stmt_block()
        return ForStmt(counter.text, start_expr, bound, direction, body, span=self._extend_span(start))

    def _parse_return_stmt(self) -> ReturnStmt:
        start = self._span_start()
        self._expect(TokenKind.RETURN, "[PAR-0150] expected 'return'")
        value: Optional[Expr] = None
        if not self._check(TokenKind.SEMI):
            value = self._parse_expr()
        self._expect(TokenKind.SEMI, "[PAR-0151] expected ';' after return")
        return ReturnStmt(value, span=self._extend_span(start))

    def _parse_break_stmt(self) -> BreakStmt:
        start = self._span_start()
        self._expect(TokenKind.BREAK, "[PAR-0190] expected 'break'")
        self._expect(TokenKind.SEMI, "[PAR-0191] expected ';' after 'break'")
        return BreakStmt(span=self._extend_span(start))

    def _parse_continue_stmt(self) -> ContinueStmt:
        start = self._span_start()
        self._expect(TokenKind.CONTINUE, "[PAR-0200] expected 'continue'")
        self._expect(TokenKind.SEMI, "[PAR-0201] expected ';' after 'continue'")
        return ContinueStmt(span=self._extend_span(start))

    # --- expressions with precedence ---

    def _parse_expr(self) -> Expr:
        return self._parse_ternary_expr()

    def _parse_ternary_expr(self) -> Expr:
        start = self._span_start()
        cond = self._parse_or_expr()
        if self._match(TokenKind.QUESTION):
            then_expr = self._parse_expr()
            self._expect(TokenKind.COLON, "[PAR-0220] expected ':' in conditional expression")
            else_expr = self._parse_ternary_expr()
            return TernaryOp(cond, then_expr, else_expr, span=self._extend_span(start))
        return cond

    def _parse_binary_level(self, operand, *kinds: TokenKind) -> Expr:
        start = self._span_start()
        expr = operand()
        while self._match(*kinds):
            op_tok = self._last()
            right = operand()
            expr = BinaryOp(op_tok.text, expr, right, span=self._extend_span(start))
        return expr

    def _parse_or_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_and_expr, TokenKind.OROR)

    def _parse_and_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_equality_expr, TokenKind.ANDAND)

    def _parse_equality_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_rel_expr, TokenKind.EQEQ, TokenKind.NE)

    def _parse_rel_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_add_expr,
                                        TokenKind.LT, TokenKind.GT, TokenKind.LE, TokenKind.GE)

    def _parse_add_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_mul_expr, TokenKind.PLUS, TokenKind.MINUS)

    def _parse_mul_expr(self) -> Expr:
        return self._parse_binary_level(self._parse_unary_expr, TokenKind.STAR, TokenKind.SLASH, TokenKind.MODULO)

    def _parse_unary_expr(self) -> Expr:
        start = self._span_start()
        # prefix unary operators: !, -, +
        if self._match(TokenKind.BANG, TokenKind.MINUS, TokenKind.PLUS):
            op_tok = self._last()
            operand = self._parse_unary_expr()
            return UnaryOp(op_tok.text, operand, span=self._extend_span(start))
        return self._parse_primary_expr()

    def _parse_call(self) -> CallExpr:
        start = self._span_start()
        name_tok = self._expect(TokenKind.IDENT, "[PAR-0209] expected function name")
        self._expect(TokenKind.LPAREN, "[PAR-0212] expected '(' after function name")
        args: List[Expr] = []
        if not self._check(TokenKind.RPAREN):
            while True:
                args.append(self._parse_expr())
                if not self._match(TokenKind.COMMA):
                    break
        self._expect(TokenKind.RPAREN, "[PAR-0210] expected ')' after arguments")
        return CallExpr(name_tok.text, args, span=self._extend_span(start))

    def _parse_primary_expr(self) -> Expr:
        start = self._span_start()
        tok = self._peek()

        # Literals
        if self._match(TokenKind.INT):
            return IntLiteral(int(tok.text), span=self._extend_span(start))
        if self._match(TokenKind.FLOAT):
            return FloatLiteral(float(tok.text), span=self._extend_span(start))
        if self._match(TokenKind.STRING):
            return StringLiteral(tok.text, span=self._extend_span(start))
        if self._match(TokenKind.TRUE):
            return BoolLiteral(True, span=self._extend_span(start))
        if self._match(TokenKind.FALSE):
            return BoolLiteral(False, span=self._extend_span(start))

        # Function call or variable reference
        if self._check(TokenKind.IDENT):
            if self._peek_at(1).kind is TokenKind.LPAREN:
                return self._parse_call()
            name_tok = self._advance()
            return VarRef(name_tok.text, span=self._extend_span(start))

        # Parenthesized expression
        if self._match(TokenKind.LPAREN):
            inner = self._parse_expr()
            self._expect(TokenKind.RPAREN, "[PAR-0224] expected ')' after expression")
            return ParenExpr(inner, span=self._extend_span(start))

        raise ParseError(f"[PAR-0225] unexpected token in expression: {tok.kind.name}:'{tok.text}'", tok,
                         self.filename)
