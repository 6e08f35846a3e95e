#!/usr/bin/env python3
"""
File: cpp_flowchart.py
Description: Front end and flowchart generator for a small subset of C++,
             written in python.
"""
"""
===============================================================================
  Tiny-C++ flow - a *single-file* analyser and flowchart generator
===============================================================================

This tool is **self-contained**: install `ply` (Python-Lex-Yacc) and run

    python cpp_flowchart.py prog.cpp                     # parse tree + diagnostics
    python cpp_flowchart.py prog.cpp --emit dot          # Graphviz flowchart
    python cpp_flowchart.py prog.cpp --emit mermaid      # Mermaid flowchart

-------------------------------------------------------------------------------
Supported language features
-------------------------------------------------------------------------------
+  Preprocessor lines and `using namespace X;` (skipped)
+  Variable declarations: const, pointers (int*), arrays (a[5]), `= expr`
   and `{...}` initialisers, template arguments (vector<int>) skipped
+  Function definitions (parameters are not bound into scope)
+  Blocks, if / else, while, do-while, for, break, continue, return, delete
+  Expressions: = || && == != < > <= >= << >> + - * / % unary + - ! ++ --,
   postfix ++ --, indexing, new T / new T[n], brace lists

The pipeline has four stages:
    * lexical analysis & token classification        (PLY lexer)
    * recursive-descent parsing into an AST           (hand written)
    * block-scoped symbol table + type diagnostics    (during parsing)
    * control-flow diagram synthesis                  (DOT or Mermaid)

It keeps analysing after syntax errors: every problem becomes a diagnostic,
parsing resynchronises at the next statement boundary.

Limitations / non-goals -------------------------------------------------------
* Not a full C++ implementation (no classes, overloads, calls, templates ...)
* Type checking is a permissive heuristic over primitive type names
* break / continue are drawn in sequence, not wired to the loop exit
"""
# =============================================================================
#  Imports
# =============================================================================
import argparse
import os
import re
import sys
from collections import defaultdict, namedtuple

try:
    import ply.lex as lex
except ImportError:
    sys.stderr.write("[FATAL] This script depends on the PLY package.\n"
                     "        pip install ply\n")
    raise

Token = namedtuple('Token', 'type value line col')
Diagnostic = namedtuple('Diagnostic', 'line col message')

# =============================================================================
#  1.  Lexer  ──────────────────────────────────────────────────────────────────
# =============================================================================
KEYWORDS = {
    # types
    'int', 'float', 'double', 'char', 'bool', 'void', 'long', 'short',
    'unsigned', 'signed', 'auto', 'const', 'static', 'volatile',
    # control flow
    'if', 'else', 'switch', 'case', 'default', 'break', 'continue',
    'for', 'while', 'do', 'return', 'goto',
    # logical words
    'and', 'or', 'not', 'xor',
    # everything else
    'struct', 'class', 'union', 'enum', 'namespace', 'using',
    'new', 'delete', 'template', 'typename',
    'public', 'private', 'protected',
}

BOOL_LITERALS = {'true', 'false'}

tokens = [
    # Identifiers / literals
    'IDENT', 'NUMBER', 'STRING', 'CHAR', 'BOOL', 'KEYWORD',

    # Operators
    'OP', 'ARROW', 'DCOLON',

    # Delimiters
    'LPAREN', 'RPAREN', 'LBRACE', 'RBRACE', 'LBRACKET', 'RBRACKET',
    'SEMI', 'COMMA', 'DOT', 'COLON',

    # Opaque / filtered
    'PREPROCESSOR', 'UNKNOWN',
]

EOF = 'EOF'

# Token regex -----------------------------------------------------------------

t_ignore          = ' \t\r\f\v'

t_LPAREN          = r'\('
t_RPAREN          = r'\)'
t_LBRACE          = r'\{'
t_RBRACE          = r'\}'
t_LBRACKET        = r'\['
t_RBRACKET        = r'\]'
t_SEMI            = r';'
t_COMMA           = r','
t_DOT             = r'\.'
t_COLON           = r':'

# Track line numbers -----------------------------------------------------------

def t_newline(t):
    r'\n+'
    t.lexer.lineno += len(t.value)

def t_COMMENT(t):                 # // line comment
    r'//[^\n]*'
    pass

def t_MCOMMENT(t):                # /* block comment */
    r'/\*[\s\S]*?\*/'
    t.lexer.lineno += t.value.count('\n')

def t_MCOMMENT_OPEN(t):           # /* without */ runs to the end of input
    r'/\*[\s\S]*'
    t.lexer.lineno += t.value.count('\n')

# ── pre-processor directives (e.g., #include <iostream>) ─────────────────────
def t_PREPROCESSOR(t):
    r'\#[^\n]*'        # match “# …” up to the end-of-line, kept verbatim
    return t

# ── string / char literals ───────────────────────────────
# The lexeme keeps its quotes and escapes untouched. A missing closing quote
# is reported but the partial literal is still returned.
def t_STRING(t):
    r'"(?:[^"\\]|\\[\s\S]?)*"?'
    _finish_quoted(t, '"', "unterminated string literal")
    return t

def t_CHAR(t):
    r"'(?:\\[\s\S]?|[^'\\])?'?"
    _finish_quoted(t, "'", "unterminated character literal")
    return t

# Numbers ---------------------------------------------------------------------

def t_NUMBER(t):
    r'0[xX][0-9a-fA-F]*|0[bB][01]*|\d+(?:\.\d+)?[^\W\d]*'
    return t

# Identifiers / keywords -------------------------------------------------------

def t_IDENT(t):
    r'[^\W\d]\w*'
    if t.value in BOOL_LITERALS:
        t.type = 'BOOL'
    elif t.value in KEYWORDS:
        t.type = 'KEYWORD'
    return t

# Operators (two-character forms first) ----------------------------------------

def t_ARROW(t):
    r'->'
    return t

def t_DCOLON(t):
    r'::'
    return t

def t_OP(t):
    r'==|!=|<=|>=|&&|\|\||\+\+|--|<<|>>|[-+*/%=<>!&|^~?]'
    return t

# Error handling ---------------------------------------------------------------

def t_error(t):
    t.type = 'UNKNOWN'
    t.value = t.value[0]
    t.lexer.skip(1)
    return t


def _column(text, pos):
    return pos - text.rfind('\n', 0, pos)


def _is_closed(lexeme, quote):
    i = 1
    while i < len(lexeme):
        if lexeme[i] == '\\':
            i += 2
            continue
        if lexeme[i] == quote:
            return i == len(lexeme) - 1
        i += 1
    return False


def _finish_quoted(t, quote, message):
    t.lexer.lineno += t.value.count('\n')
    if not _is_closed(t.value, quote):
        end = t.lexpos + len(t.value)
        t.lexer.errors.append(
            Diagnostic(t.lexer.lineno, _column(t.lexer.lexdata, end), message))


_master_lexer = lex.lex()


class Lexer:
    """Turns source text into a list of Token, collecting lexical errors.

    Scanning never aborts: unknown characters are dropped from the stream and
    the result always ends with a single EOF token.
    """

    def __init__(self, source):
        self.source = source or ''
        self.errors = []

    def scan(self):
        self.errors = []
        lexer = _master_lexer.clone()
        lexer.lineno = 1
        lexer.errors = self.errors
        lexer.input(self.source)

        out = []
        for tok in iter(lexer.token, None):
            if tok.type == 'UNKNOWN':
                continue
            out.append(Token(tok.type, tok.value, tok.lineno,
                             _column(self.source, tok.lexpos)))
        out.append(Token(EOF, '', lexer.lineno,
                         _column(self.source, len(self.source))))
        return out

# =============================================================================
#  2.  Symbol table  ───────────────────────────────────────────────────────────
# =============================================================================
READY_KINDS = ('std', 'type')       # built-ins never need initialising

BUILTINS = [
    # name       kind     type
    ('cout',   'std',  'ostream'),
    ('cin',    'std',  'istream'),
    ('cerr',   'std',  'ostream'),
    ('endl',   'std',  'manipulator'),
    ('string', 'type', 'string'),
    ('vector', 'type', 'vector'),
    ('map',    'type', 'map'),
    ('set',    'type', 'set'),
    ('list',   'type', 'list'),
]


class Entry:
    def __init__(self, name, kind, type_, line, col, depth=-1,
                 is_const=False, initialized=False, shadowed=None):
        self.name = name
        self.kind = kind                # var / func / param / type / std
        self.type = type_
        self.line, self.col = line, col
        self.depth = depth
        self.is_const = is_const
        self.initialized = initialized
        self.shadowed = shadowed        # index into ScopeManager.entries
        self.index = -1

    def __repr__(self):
        return (f"{self.name}:{self.type} (kind={self.kind}, depth={self.depth}, "
                f"const={self.is_const}, init={self.initialized})")


class Scope:
    def __init__(self, depth, parent=None):
        self.depth = depth
        self.parent = parent
        self.bindings = {}


class ScopeManager:
    """Stack of lexical scopes with declaration, lookup and shadowing.

    Diagnostics go to the ``errors`` list handed in by the owner, so the
    parser and the symbol table share a single channel. Every entry ever
    declared stays in ``entries``; ``Entry.shadowed`` points into it by index
    rather than holding the outer entry itself.
    """

    def __init__(self, errors=None):
        self.errors = errors if errors is not None else []
        self.entries = []
        self.stack = []
        self.enter_scope()              # global scope
        for name, kind, type_ in BUILTINS:
            self.declare(name, kind, type_)

    @property
    def depth(self):
        return self.stack[-1].depth

    def enter_scope(self):
        parent = self.stack[-1] if self.stack else None
        self.stack.append(Scope(len(self.stack), parent))

    def exit_scope(self):
        if len(self.stack) > 1:
            self.stack.pop()

    def lookup(self, name):
        scope = self.stack[-1]
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent
        return None

    def declare(self, name, kind, type_, is_const=False, line=-1, col=-1):
        current = self.stack[-1]
        if name in current.bindings:
            self.errors.append(Diagnostic(
                line, col, f"redeclaration of '{name}' in the same scope"))
            return current.bindings[name]

        outer = self.lookup(name)
        entry = Entry(name, kind, type_, line, col,
                      depth=current.depth,
                      is_const=is_const,
                      initialized=kind in READY_KINDS,
                      shadowed=outer.index if outer is not None else None)
        entry.index = len(self.entries)
        self.entries.append(entry)
        current.bindings[name] = entry
        return entry

    def require(self, name, line, col):
        entry = self.lookup(name)
        if entry is None:
            self.errors.append(Diagnostic(
                line, col, f"use of undeclared identifier '{name}'"))
            return None
        if not entry.initialized and entry.kind not in READY_KINDS:
            self.errors.append(Diagnostic(
                line, col, f"use of uninitialized variable '{name}'"))
        return entry

    def shadowed(self, entry):
        if entry.shadowed is None:
            return None
        return self.entries[entry.shadowed]

# =============================================================================
#  3.  AST  ────────────────────────────────────────────────────────────────────
# =============================================================================
class Node:
    children = ()

    def describe(self):
        return self.__class__.__name__

    def walk(self, indent=0):
        pad = '  '*indent
        yield f"{pad}{self.describe()}"
        for child in self.children:
            if isinstance(child, Node):
                yield from child.walk(indent+1)
            elif child is not None:
                yield f"{pad}  {child!r}"

# --- statements ---------------------------------------------------------------
class Program(Node):
    def __init__(self, body):
        self.body = body
        self.children = body

class Block(Node):
    def __init__(self, body):
        self.body = body
        self.children = body

class VarDecl(Node):
    def __init__(self, type_name, name, init=None, dims='', is_const=False):
        self.type_name, self.name, self.init = type_name, name, init
        self.dims, self.is_const = dims, is_const
        self.children = [init] if init is not None else []
    def describe(self):
        const = 'const ' if self.is_const else ''
        return f"VarDecl {const}{self.type_name} {self.name}{self.dims}"

class FuncDef(Node):
    def __init__(self, ret_type, name, body):
        self.ret_type, self.name, self.body = ret_type, name, body
        self.children = [body]
    def describe(self):
        return f"FuncDef {self.ret_type} {self.name}()"

class If(Node):
    def __init__(self, cond, then, orelse=None):
        self.cond, self.then, self.orelse = cond, then, orelse
        self.children = [c for c in (cond, then, orelse) if c is not None]

class While(Node):
    def __init__(self, cond, body):
        self.cond, self.body = cond, body
        self.children = [c for c in (cond, body) if c is not None]

class DoWhile(Node):
    def __init__(self, body, cond):
        self.body, self.cond = body, cond
        self.children = [c for c in (body, cond) if c is not None]

class For(Node):
    def __init__(self, init, cond, step, body):
        self.init = init
        self.cond = cond
        self.step = step
        self.body = body
        self.children = [c for c in (init, cond, step, body) if c is not None]

class Return(Node):
    def __init__(self, value=None):
        self.value = value
        self.children = [value] if value is not None else []

class Break(Node):
    pass

class Continue(Node):
    pass

class Delete(Node):
    def __init__(self, target, is_array=False):
        self.target, self.is_array = target, is_array
        self.children = [target]
    def describe(self):
        return 'Delete[]' if self.is_array else 'Delete'

class ExprStmt(Node):
    def __init__(self, expr):
        self.expr = expr
        self.children = [expr]

# --- expressions --------------------------------------------------------------
class Assign(Node):
    def __init__(self, target, op, value):
        self.target, self.op, self.value = target, op, value
        self.children = [target, value]
    def describe(self):
        return f"Assign '{self.op}'"

class Binary(Node):
    def __init__(self, op, lhs, rhs):
        self.op, self.lhs, self.rhs = op, lhs, rhs
        self.children = [lhs, rhs]
    def describe(self):
        return f"Binary '{self.op}'"

class Unary(Node):
    def __init__(self, op, operand):
        self.op, self.operand = op, operand
        self.children = [operand]
    def describe(self):
        return f"Unary '{self.op}'"

class Postfix(Node):
    def __init__(self, op, operand):
        self.op, self.operand = op, operand
        self.children = [operand]
    def describe(self):
        return f"Postfix '{self.op}'"

class Index(Node):
    def __init__(self, target, index):
        self.target, self.index = target, index
        self.children = [target, index]

class New(Node):
    def __init__(self, type_name, size=None):
        self.type_name, self.size = type_name, size
        self.children = [size] if size is not None else []
    def describe(self):
        return f"New {self.type_name}" + ('[]' if self.size is not None else '')

class InitList(Node):
    def __init__(self, items):
        self.items = items
        self.children = items

class Identifier(Node):
    def __init__(self, name, line=-1, col=-1):
        self.name = name
        self.line, self.col = line, col
    def describe(self):
        return f"Identifier {self.name}"

class Literal(Node):
    def __init__(self, kind, value, line=-1, col=-1):
        self.kind = kind                # number / string / char / bool / error
        self.value = value
        self.line, self.col = line, col
    def describe(self):
        return f"Literal {self.kind} {self.value}"

# =============================================================================
#  4.  Type diagnostics  ───────────────────────────────────────────────────────
# =============================================================================
ARITHMETIC_OPS = {'+', '-', '*', '/', '%', '<<', '>>'}
LOGICAL_OPS = {'&&', '||'}
COMPARISON_OPS = {'==', '!=', '<', '>', '<=', '>='}

INTEGER_TYPES = ('int', 'short', 'long')
FLOAT_TYPES = ('double', 'float')


def expression_type(node, scopes):
    """Best-effort primitive type name of an expression tree.

    Purely local: identifiers take their declared type, everything else is
    derived from the node kind and its children.
    """
    if node is None:
        return 'unknown'
    if isinstance(node, Literal):
        if node.kind == 'number':
            return 'double' if any(c in node.value for c in '.eE') else 'int'
        if node.kind in ('bool', 'string', 'char'):
            return node.kind
        return 'unknown'
    if isinstance(node, Identifier):
        entry = scopes.lookup(node.name)
        return entry.type.lower() if entry is not None else 'undeclared'
    if isinstance(node, Binary):
        left = expression_type(node.lhs, scopes)
        right = expression_type(node.rhs, scopes)
        if node.op in ARITHMETIC_OPS:
            if left in FLOAT_TYPES or right in FLOAT_TYPES:
                return 'double'
            if left in INTEGER_TYPES or right in INTEGER_TYPES:
                return 'int'
            return 'unknown'
        if node.op in LOGICAL_OPS or node.op in COMPARISON_OPS:
            return 'bool'
        return 'unknown'
    if isinstance(node, Index):
        return 'int'
    if isinstance(node, New):
        return node.type_name + '*'
    if isinstance(node, Delete):
        return 'void'
    if isinstance(node, Unary):
        return expression_type(node.operand, scopes)
    if isinstance(node, InitList):
        return 'array'
    return 'unknown'


def types_compatible(left, right):
    """Can a value of type `right` be stored in a `left`? (not symmetric)"""
    left, right = left.lower(), right.lower()
    if left == right:
        return True
    if '[' in left and ']' in left and right == 'array':
        return True
    if '*' in left and '*' in right:
        return True
    if left in INTEGER_TYPES and right in INTEGER_TYPES:
        return True
    if left in FLOAT_TYPES:
        return right in INTEGER_TYPES + FLOAT_TYPES
    if left == 'bool':
        return right == 'bool'
    if left in ('string', 'char'):
        return right == left
    return False

# =============================================================================
#  5.  Parser  ─────────────────────────────────────────────────────────────────
# =============================================================================
#   Grammar in EBNF (high-level)
#   ---------------------------
#   program       ::= { preprocessor | using_ns | statement }
#   statement     ::= declaration | if | while | do_while | for | block
#                   | 'break' ';' | 'continue' ';' | 'return' [expr] ';'
#                   | 'delete' ['[' ']'] expr ';' | expr ';'
#   declaration   ::= ['const'] type ['<' ... '>'] {'*'} ID
#                     ( '(' ... ')' block | { '[' [expr] ']' } [ '=' expr | list ] ';' )
#   expr          ::= logical_or [ '=' expr ]
#   logical_or    ::= logical_and { '||' logical_and }
#   logical_and   ::= equality    { '&&' equality }
#   equality      ::= relational  { ( '==' | '!=' ) relational }
#   relational    ::= additive    { ( '<' | '>' | '<=' | '>=' | '<<' | '>>' ) additive }
#   additive      ::= term        { ( '+' | '-' ) term }
#   term          ::= unary       { ( '*' | '/' | '%' ) unary }
#   unary         ::= ( '+' | '-' | '!' | '++' | '--' ) unary | postfix
#   postfix       ::= primary { '++' | '--' } { '[' expr ']' }
#   primary       ::= '(' expr ')' | list | 'new' type ['[' expr ']'] | ID
#                   | NUMBER | STRING | CHAR | BOOL
# =============================================================================
TYPE_KEYWORDS = {'int', 'float', 'double', 'char', 'bool', 'void',
                 'long', 'short', 'unsigned', 'signed', 'auto'}
TYPE_IDENTS = {'vector', 'string'}

UNARY_OPS = {'+', '-', '!', '++', '--'}
LITERAL_KINDS = {'NUMBER': 'number', 'STRING': 'string',
                 'CHAR': 'char', 'BOOL': 'bool'}


class ParserState:
    def __init__(self):
        self.pos = 0
        self.recovering = False     # suppresses repeated "expected X" errors


class Parser:
    """Recursive-descent parser that checks scopes and types as it goes.

    Problems never stop the parse: they are appended to ``errors`` and the
    parser resynchronises at the next statement boundary.
    """

    def __init__(self, tokens):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != EOF:
            self.tokens.append(Token(EOF, '', -1, -1))
        self.state = ParserState()
        self.errors = []
        self.scopes = ScopeManager(self.errors)

    # -- entry point -----------------------------------------------------------
    def parse(self):
        try:
            return self.parse_program()
        except Exception as e:
            self.errors.append(Diagnostic(-1, -1, f"internal parser error: {e}"))
            return None

    # -- token cursor ----------------------------------------------------------
    @property
    def tok(self):
        return self.tokens[self.state.pos]

    def _step(self):
        tok = self.tokens[self.state.pos]
        if self.state.pos < len(self.tokens) - 1:
            self.state.pos += 1
        return tok

    def advance(self):
        self.state.recovering = False
        return self._step()

    def at(self, type_, value=None):
        tok = self.tok
        return tok.type == type_ and (value is None or tok.value == value)

    def at_op(self, ops):
        return self.tok.type == 'OP' and self.tok.value in ops

    def at_eof(self):
        return self.tok.type == EOF

    def error(self, line, col, message):
        self.errors.append(Diagnostic(line, col, message))

    def error_here(self, message):
        self.error(self.tok.line, self.tok.col, message)

    def expect(self, type_, value, message):
        if self.at(type_, value):
            return self.advance()
        if not self.state.recovering:
            self.state.recovering = True
            self.error_here(message)
        return self.tok

    def skip_to_semicolon(self):
        while self.tok.type not in ('SEMI', 'RBRACE', 'RPAREN', EOF):
            self._step()
        if self.at('SEMI'):
            self._step()

    def skip_to(self, *types):
        stop = set(types) | {'LBRACE', 'RBRACE', EOF}
        while self.tok.type not in stop:
            self._step()

    def is_type(self, tok):
        if tok.type == 'KEYWORD':
            return tok.value in TYPE_KEYWORDS
        return tok.type == 'IDENT' and tok.value in TYPE_IDENTS

    # -- top level -------------------------------------------------------------
    def parse_program(self):
        body = []
        while not self.at_eof():
            if self.at('PREPROCESSOR') or self.at('SEMI') or self.at('RBRACE'):
                self.advance()
                continue
            if self.at('KEYWORD', 'using'):
                self.parse_using()
                continue

            stmt = self.parse_statement()
            if stmt is not None:
                body.append(stmt)
            elif not self.at_eof():
                self.skip_to_semicolon()
            self.state.recovering = False
        return Program(body)

    def parse_using(self):
        self.advance()                          # using
        if not self.at('KEYWORD', 'namespace'):
            return
        self.advance()
        if self.at('IDENT'):
            self.advance()                      # the namespace itself is not tracked
        if self.at('SEMI'):
            self.advance()
        else:
            self.error_here("expected ';' after using directive")

    # -- declarations ----------------------------------------------------------
    def parse_statement(self):
        """Declaration if a type name follows, any other statement otherwise."""
        const_tok = None
        if self.at('KEYWORD', 'const'):
            const_tok = self.advance()

        if not self.is_type(self.tok):
            if const_tok is not None:
                self.error(const_tok.line, const_tok.col, "expected a type after 'const'")
            return self.parse_plain_statement()

        type_tok = self.advance()
        self.skip_template_arguments()

        pointers = ''
        while self.at('OP', '*'):
            self.advance()
            pointers += '*'

        if not self.at('IDENT'):
            self.error_here("expected identifier after type")
            return None
        name_tok = self.advance()

        if self.at('LPAREN'):
            if const_tok is not None:
                self.error(const_tok.line, const_tok.col,
                           "'const' cannot be applied to a function declaration")
            return self.parse_function(type_tok.value + pointers, name_tok)
        return self.parse_var_decl(type_tok.value + pointers, name_tok, const_tok is not None)

    def skip_template_arguments(self):
        if not self.at('OP', '<'):
            return
        depth = 0
        while not self.at_eof():
            tok = self.advance()
            if tok.type == 'OP' and tok.value == '<':
                depth += 1
            elif tok.type == 'OP' and tok.value in ('>', '>>'):
                depth -= len(tok.value)
                if depth <= 0:
                    break

    def parse_var_decl(self, base_type, name_tok, is_const):
        name = name_tok.value

        dims = ''
        while self.at('LBRACKET'):
            self.advance()
            if not self.at('RBRACKET'):
                self.parse_expression()         # only checked for undeclared names
            dims += '[]'
            if self.at('RBRACKET'):
                self.advance()
            else:
                self.error_here("expected ']' in array declaration")

        full_type = base_type + dims
        self.scopes.declare(name, 'var', full_type, is_const, name_tok.line, name_tok.col)

        init = None
        if self.at('OP', '='):
            self.advance()
            init = self.parse_expression()
        elif self.at('LBRACE'):
            init = self.parse_primary()

        if init is not None:
            init_type = expression_type(init, self.scopes)
            if not types_compatible(full_type, init_type):
                self.error(name_tok.line, name_tok.col,
                           f"type mismatch in initialization of '{name}': "
                           f"{full_type} = {init_type}")
            entry = self.scopes.lookup(name)
            if entry is not None:
                entry.initialized = True
        elif is_const:
            self.error(name_tok.line, name_tok.col,
                       f"const variable '{name}' must be initialized")

        self.skip_to_semicolon()
        return VarDecl(base_type, name, init, dims, is_const)

    def parse_function(self, ret_type, name_tok):
        self.scopes.declare(name_tok.value, 'func', ret_type, False,
                            name_tok.line, name_tok.col)

        # parameters are skipped as balanced parentheses, never bound
        self.advance()                          # (
        depth = 1
        while not self.at_eof():
            if self.at('LPAREN'):
                depth += 1
            elif self.at('RPAREN'):
                depth -= 1
                if depth == 0:
                    break
            self.advance()
        self.expect('RPAREN', None, "expected ')' in function declaration")

        self.scopes.enter_scope()
        if self.at('LBRACE'):
            body = self.parse_block()
        else:
            self.error(name_tok.line, name_tok.col,
                       "warning: missing '{' after function declaration, assuming a body")
            stmts = []
            while not self.at_eof() and not self.at('KEYWORD', 'return'):
                stmt = self.parse_statement()
                if stmt is not None:
                    stmts.append(stmt)
                else:
                    self.skip_to_semicolon()
            if self.at('KEYWORD', 'return'):
                stmts.append(self.parse_plain_statement())
            body = Block(stmts)
        self.scopes.exit_scope()
        return FuncDef(ret_type, name_tok.value, body)

    # -- statements ------------------------------------------------------------
    def parse_plain_statement(self):
        if self.at('KEYWORD', 'const') or self.is_type(self.tok):
            return self.parse_statement()
        if self.at('KEYWORD', 'if'):
            return self.parse_if()
        if self.at('KEYWORD', 'while'):
            return self.parse_while()
        if self.at('KEYWORD', 'do'):
            return self.parse_do_while()
        if self.at('KEYWORD', 'for'):
            return self.parse_for()
        if self.at('LBRACE'):
            return self.parse_block()

        if self.at('KEYWORD', 'break'):
            self.advance()
            self.expect('SEMI', None, "expected ';' after break")
            return Break()
        if self.at('KEYWORD', 'continue'):
            self.advance()
            self.expect('SEMI', None, "expected ';' after continue")
            return Continue()

        if self.at('KEYWORD', 'return'):
            self.advance()
            value = None if self.at('SEMI') else self.parse_expression()
            self.expect('SEMI', None, "expected ';' after return")
            return Return(value)

        if self.at('KEYWORD', 'delete'):
            self.advance()
            is_array = False
            if self.at('LBRACKET'):
                self.advance()
                is_array = True
                self.expect('RBRACKET', None, "expected ']' after delete")
            target = self.parse_expression()
            self.expect('SEMI', None, "expected ';' after delete")
            return Delete(target, is_array)

        expr = self.parse_expression()
        self.skip_to_semicolon()
        return ExprStmt(expr)

    def parse_condition(self, keyword):
        if self.at('LPAREN'):
            self.advance()
            cond = self.parse_expression()
            self.expect('RPAREN', None, f"expected ')' after {keyword} condition")
            return cond
        self.error_here(f"expected '(' after '{keyword}', parsing condition without parentheses")
        cond = self.parse_expression()
        self.skip_to('LBRACE', 'SEMI')
        return cond

    def parse_if(self):
        self.advance()
        cond = self.parse_condition('if')

        self.scopes.enter_scope()
        then = self.parse_statement_or_block()
        self.scopes.exit_scope()

        orelse = None
        if self.at('KEYWORD', 'else'):
            self.advance()
            self.scopes.enter_scope()
            orelse = self.parse_statement_or_block()
            self.scopes.exit_scope()
        return If(cond, then, orelse)

    def parse_while(self):
        self.advance()
        cond = self.parse_condition('while')
        body = self.parse_statement_or_block()
        return While(cond, body)

    def parse_do_while(self):
        self.advance()
        body = self.parse_statement_or_block()
        if self.at('KEYWORD', 'while'):
            self.advance()
        else:
            self.error_here("expected 'while' at the end of do-while")
        self.expect('LPAREN', None, "expected '(' after 'while'")
        cond = self.parse_expression()
        self.expect('RPAREN', None, "expected ')' after do-while condition")
        self.expect('SEMI', None, "expected ';' after do-while")
        return DoWhile(body, cond)

    def parse_for(self):
        self.advance()
        self.expect('LPAREN', None, "expected '(' after 'for'")

        # one scope spans the header and the body
        self.scopes.enter_scope()

        init = None
        if self.at('SEMI'):
            self.advance()
        elif self.at('KEYWORD', 'const') or self.is_type(self.tok):
            init = self.parse_statement()       # consumes its own ';'
        else:
            init = self.parse_expression()
            self._skip_header_clause()

        cond = None
        if self.at('SEMI'):
            self.advance()
        else:
            cond = self.parse_expression()
            self._skip_header_clause()

        step = None
        if not self.at('RPAREN'):
            step = self.parse_expression()
        while not self.at('RPAREN') and not self.at_eof():
            self._step()
        self.expect('RPAREN', None, "expected ')' after for header")

        body = self.parse_statement_or_block()
        self.scopes.exit_scope()
        return For(init, cond, step, body)

    def _skip_header_clause(self):
        while self.tok.type not in ('SEMI', 'RPAREN', EOF):
            self._step()
        if self.at('SEMI'):
            self.advance()

    def parse_block(self):
        self.advance()                          # {
        self.scopes.enter_scope()
        stmts = []
        while not self.at('RBRACE') and not self.at_eof():
            if self.at('SEMI'):
                self.advance()
                continue
            stmt = self.parse_plain_statement()
            if stmt is not None:
                stmts.append(stmt)
            else:
                self.skip_to_semicolon()
        self.expect('RBRACE', None, "expected '}'")
        self.scopes.exit_scope()
        return Block(stmts)

    def parse_statement_or_block(self):
        if self.at('LBRACE'):
            return self.parse_block()
        return self.parse_plain_statement()

    # -- expressions -----------------------------------------------------------
    def parse_expression(self):
        return self.parse_assignment()

    def parse_assignment(self):
        left = self.parse_logical_or()
        if not self.at('OP', '='):
            return left

        op = self.advance()
        right = self.parse_assignment()
        if isinstance(left, Identifier):
            entry = self.scopes.lookup(left.name)
            if entry is not None and entry.is_const:
                self.error(op.line, op.col,
                           f"cannot assign to const variable '{left.name}'")
            elif entry is not None:
                left_type = entry.type.lower()
                right_type = expression_type(right, self.scopes)
                if not types_compatible(left_type, right_type):
                    self.error(op.line, op.col,
                               f"type mismatch in assignment to '{left.name}': "
                               f"{left_type} = {right_type}")
                entry.initialized = True
        return Assign(left, op.value, right)

    def _left_assoc(self, operand, ops):
        left = operand()
        while self.at_op(ops):
            op = self.advance().value
            left = Binary(op, left, operand())
        return left

    def parse_logical_or(self):
        return self._left_assoc(self.parse_logical_and, ('||',))

    def parse_logical_and(self):
        return self._left_assoc(self.parse_equality, ('&&',))

    def parse_equality(self):
        return self._left_assoc(self.parse_relational, ('==', '!='))

    def parse_relational(self):
        return self._left_assoc(self.parse_additive, ('<', '>', '<=', '>=', '<<', '>>'))

    def parse_additive(self):
        return self._left_assoc(self.parse_term, ('+', '-'))

    def parse_term(self):
        return self._left_assoc(self.parse_unary, ('*', '/', '%'))

    def parse_unary(self):
        if self.at_op(UNARY_OPS):
            op = self.advance().value
            return Unary(op, self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self):
        expr = self.parse_primary()

        while self.at_op(('++', '--')):
            op = self.advance()
            if isinstance(expr, Identifier):
                entry = self.scopes.lookup(expr.name)
                if entry is not None and entry.is_const:
                    self.error(op.line, op.col,
                               f"cannot increment or decrement const variable '{expr.name}'")
                elif entry is not None:
                    entry.initialized = True
            expr = Postfix(op.value, expr)

        while self.at('LBRACKET'):
            self.advance()
            index = self.parse_expression()
            self.expect('RBRACKET', None, "expected ']' after array index")
            expr = Index(expr, index)
        return expr

    def parse_primary(self):
        tok = self.tok

        if self.at('KEYWORD', 'new'):
            self.advance()
            if not self.is_type(self.tok):
                self.error(tok.line, tok.col, "expected a type after 'new'")
                return Literal('error', 'new', tok.line, tok.col)
            type_tok = self.advance()
            size = None
            if self.at('LBRACKET'):
                self.advance()
                size = self.parse_expression()
                self.expect('RBRACKET', None, "expected ']' after array size in new")
            return New(type_tok.value, size)

        if self.at('LPAREN'):
            self.advance()
            expr = self.parse_expression()
            if self.at('RPAREN'):
                self.advance()
            else:
                self.error_here("expected ')' in expression")
            return expr

        if self.at('LBRACE'):
            self.advance()
            items = []
            while not self.at('RBRACE') and not self.at_eof():
                items.append(self.parse_expression())
                if self.at('COMMA'):
                    self.advance()
                elif not self.at('RBRACE'):
                    break
            self.expect('RBRACE', None, "expected '}' in initializer list")
            return InitList(items)

        if tok.type == 'IDENT':
            self.advance()
            self.scopes.require(tok.value, tok.line, tok.col)
            return Identifier(tok.value, tok.line, tok.col)

        if tok.type in LITERAL_KINDS:
            self.advance()
            return Literal(LITERAL_KINDS[tok.type], tok.value, tok.line, tok.col)

        self.error(tok.line, tok.col, f"expected expression, got '{tok.value}'")
        self.advance()
        return Literal('error', tok.value, tok.line, tok.col)

# =============================================================================
#  6.  Flowchart synthesis  ────────────────────────────────────────────────────
# =============================================================================
IO_NAMES = {'cin', 'cout', 'cerr', 'scanf', 'printf',
            'ReadLine', 'WriteLine', 'read', 'write'}

DECISION_LABELS = ('yes', 'no')

FlowNode = namedtuple('FlowNode', 'id shape label')
FlowEdge = namedtuple('FlowEdge', 'src dst label')


def expression_label(n):
    """Source-like text for an expression, operators written infix."""
    if n is None:
        return ''
    if isinstance(n, Identifier):
        return n.name
    if isinstance(n, Literal):
        return n.value
    if isinstance(n, Binary):
        return f"{expression_label(n.lhs)} {n.op} {expression_label(n.rhs)}"
    if isinstance(n, Assign):
        return f"{expression_label(n.target)} {n.op} {expression_label(n.value)}"
    if isinstance(n, Unary):
        return f"{n.op}{expression_label(n.operand)}"
    if isinstance(n, Postfix):
        return f"{expression_label(n.operand)}{n.op}"
    if isinstance(n, Index):
        return f"{expression_label(n.target)}[{expression_label(n.index)}]"
    if isinstance(n, New):
        if n.size is None:
            return f"new {n.type_name}"
        return f"new {n.type_name}[{expression_label(n.size)}]"
    if isinstance(n, InitList):
        return '{' + ', '.join(expression_label(i) for i in n.items) + '}'
    if isinstance(n, VarDecl):
        const = 'const ' if n.is_const else ''
        text = f"{const}{n.type_name} {n.name}{n.dims}"
        if n.init is not None:
            text += f" = {expression_label(n.init)}"
        return text
    if isinstance(n, ExprStmt):
        return expression_label(n.expr)
    if isinstance(n, (Block, Program)):
        return '{...}'
    return n.__class__.__name__


def is_io(n):
    if isinstance(n, Identifier):
        return n.name in IO_NAMES
    if isinstance(n, Binary):
        return is_io(n.lhs) or is_io(n.rhs)
    if isinstance(n, Assign):
        return is_io(n.target) or is_io(n.value)
    if isinstance(n, (Unary, Postfix)):
        return is_io(n.operand)
    if isinstance(n, Index):
        return is_io(n.target) or is_io(n.index)
    if isinstance(n, ExprStmt):
        return is_io(n.expr)
    if isinstance(n, VarDecl):
        return is_io(n.init)
    if isinstance(n, Return):
        return is_io(n.value)
    if isinstance(n, (Block, Program)):
        return any(is_io(c) for c in n.body)
    return False


class Graph:
    """Node/edge model of one flowchart; renderers only read it."""

    def __init__(self):
        self.nodes = []
        self.edges = []


class FlowchartBuilder:
    """Walks a finished AST and records its control flow in a Graph.

    Every emit_* method takes the *pending* predecessors (the nodes whose
    outgoing edge goes to whatever is emitted next) and returns the new
    pending list. Branch exits of an if/else therefore converge on the next
    node without any explicit join node.
    """

    def __init__(self):
        self.graph = Graph()
        self.node_id = 0
        self.shapes = {}
        self.decision_edges = defaultdict(int)

    def new_node(self, shape, label, pending=()):
        nid = f"n{self.node_id}"
        self.node_id += 1
        self.graph.nodes.append(FlowNode(nid, shape, label))
        self.shapes[nid] = shape
        for src in pending:
            self.add_edge(src, nid)
        return nid

    def add_edge(self, src, dst, label=None):
        # first two unlabeled edges out of a decision read "yes" then "no"
        if label is None and self.shapes.get(src) == 'decision':
            count = self.decision_edges[src]
            self.decision_edges[src] += 1
            if count < len(DECISION_LABELS):
                label = DECISION_LABELS[count]
        self.graph.edges.append(FlowEdge(src, dst, label))

    def build(self, root) -> Graph:
        start = self.new_node('terminator', 'Start')
        pending = self.emit(root, [start])
        self.new_node('terminator', 'End', pending)
        return self.graph

    def simple(self, n, label, pending):
        shape = 'io' if is_io(n) else 'process'
        return [self.new_node(shape, label, pending)]

    # Dispatcher ----------------------------------------------------------------
    def emit(self, n, pending):
        if n is None:
            return pending
        if isinstance(n, (Program, Block)):
            for stmt in n.body:
                pending = self.emit(stmt, pending)
            return pending
        if isinstance(n, If):
            return self.emit_if(n, pending)
        if isinstance(n, While):
            return self.emit_while(n, pending)
        if isinstance(n, DoWhile):
            return self.emit_do_while(n, pending)
        if isinstance(n, For):
            return self.emit_for(n, pending)
        if isinstance(n, FuncDef):
            head = self.new_node('call', f"{n.ret_type} {n.name}()", pending)
            return self.emit(n.body, [head])
        if isinstance(n, VarDecl):
            return self.simple(n, expression_label(n), pending)
        if isinstance(n, Return):
            label = 'return'
            if n.value is not None:
                label += ' ' + expression_label(n.value)
            return self.simple(n, label, pending)
        if isinstance(n, Break):
            return [self.new_node('process', 'break', pending)]
        if isinstance(n, Continue):
            return [self.new_node('process', 'continue', pending)]
        if isinstance(n, Delete):
            op = 'delete[]' if n.is_array else 'delete'
            return self.simple(n, f"{op} {expression_label(n.target)}", pending)
        if isinstance(n, ExprStmt):
            return self.emit(n.expr, pending)

        # assignments, bare expressions and anything unexpected
        label = expression_label(n)
        if not label.strip():
            return pending
        return self.simple(n, label, pending)

    def emit_branch(self, branch, decision):
        if branch is None:
            return None
        exits = self.emit(branch, [decision])
        if exits == [decision]:
            return None
        return exits

    def emit_if(self, n: If, pending):
        d = self.new_node('decision', expression_label(n.cond), pending)
        then_exits = self.emit_branch(n.then, d)
        if then_exits is None and n.orelse is not None:
            # no then-branch: the else edge still reads "no"
            self.decision_edges[d] = max(self.decision_edges[d], 1)
        else_exits = self.emit_branch(n.orelse, d)

        if then_exits and else_exits:
            return then_exits + else_exits
        return then_exits or else_exits or [d]

    def emit_while(self, n: While, pending):
        d = self.new_node('decision', expression_label(n.cond), pending)
        for src in self.emit(n.body, [d]):
            self.add_edge(src, d)
        return [d]

    def emit_do_while(self, n: DoWhile, pending):
        exits = self.emit(n.body, pending)
        d = self.new_node('decision', expression_label(n.cond), exits)
        for dst in pending:
            self.add_edge(d, dst, 'yes')
        # every back edge is the true side; the loop exit reads "no"
        self.decision_edges[d] = max(self.decision_edges[d], 1)
        return [d]

    def emit_for(self, n: For, pending):
        if n.init is not None:
            pending = [self.new_node('loop-prep', expression_label(n.init), pending)]
        cond = expression_label(n.cond) if n.cond is not None else 'true'
        d = self.new_node('decision', cond, pending)
        exits = self.emit(n.body, [d])
        if n.step is not None:
            step = self.new_node('loop-prep', expression_label(n.step), exits)
            self.add_edge(step, d)
        else:
            for src in exits:
                self.add_edge(src, d)
        return [d]

# --- renderers ----------------------------------------------------------------
class Renderer:
    """Formats a Graph as text. Subclasses supply the notation."""

    def render(self, graph, name='Flowchart'):
        lines = self.header(name)
        lines += [self.node_line(n) for n in graph.nodes]
        lines += [self.edge_line(e) for e in graph.edges]
        lines += self.footer()
        return '\n'.join(lines) + '\n'

    def header(self, name):
        return []

    def footer(self):
        return []

    def node_line(self, node):
        raise NotImplementedError

    def edge_line(self, edge):
        raise NotImplementedError


class DotRenderer(Renderer):
    SHAPES = {
        'terminator': 'ellipse',
        'process':    'box',
        'io':         'parallelogram',
        'decision':   'diamond',
        'loop-prep':  'hexagon',
        'call':       'component',
    }
    PORTS = {'yes': ':e', 'no': ':w'}

    @staticmethod
    def escape(text):
        return text.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')

    @staticmethod
    def graph_id(name):
        if re.fullmatch(r'[A-Za-z_][A-Za-z0-9_]*', name or ''):
            return name
        return '"' + DotRenderer.escape(name or '') + '"'

    def header(self, name):
        return [
            f"digraph {self.graph_id(name)} {{",
            ' rankdir=TB;',
            ' graph [bgcolor=white, splines=ortho, nodesep=0.6, ranksep=0.8, margin=0.5];',
            ' node [fontname="Arial", fontsize=10, color=black, style=solid, width=1.0, height=0.6];',
            ' edge [color=black, arrowsize=1.0, fontname="Arial", fontsize=9];',
            '',
        ]

    def footer(self):
        return ['}']

    def node_line(self, node):
        shape = self.SHAPES.get(node.shape, 'box')
        return f' {node.id} [shape={shape}, label="{self.escape(node.label)}"];'

    def edge_line(self, edge):
        if not edge.label:
            return f' {edge.src} -> {edge.dst};'
        port = self.PORTS.get(edge.label, '')
        return (f' {edge.src}{port} -> {edge.dst} [taillabel="{self.escape(edge.label)}", '
                f'labeldistance=0.3, labelangle=0];')


class MermaidRenderer(Renderer):
    SHAPES = {
        'terminator': ('([', '])'),
        'process':    ('[', ']'),
        'io':         ('[/', '/]'),
        'decision':   ('{', '}'),
        'loop-prep':  ('{{', '}}'),
        'call':       ('[[', ']]'),
    }

    @staticmethod
    def escape(text):
        text = text.replace('"', '#quot;').replace('<', '#lt;').replace('>', '#gt;')
        return text.replace('\n', '<br/>')

    def header(self, name):
        # a comment line cannot span lines
        return ['flowchart TD', '    %% ' + ' '.join((name or '').splitlines())]

    def node_line(self, node):
        left, right = self.SHAPES.get(node.shape, ('[', ']'))
        return f'    {node.id}{left}"{self.escape(node.label)}"{right}'

    def edge_line(self, edge):
        if edge.label:
            return f'    {edge.src} -->|"{self.escape(edge.label)}"| {edge.dst}'
        return f'    {edge.src} --> {edge.dst}'


RENDERERS = {'dot': DotRenderer, 'mermaid': MermaidRenderer}


def build_graph(tree):
    return FlowchartBuilder().build(tree)


def synthesize(tree, name='Flowchart', notation='dot'):
    """Flowchart text for `tree` in the requested notation ('dot' or 'mermaid')."""
    if notation not in RENDERERS:
        raise ValueError(f"unknown notation '{notation}'")
    return RENDERERS[notation]().render(build_graph(tree), name)

# =============================================================================
#  7.  Driver  ─────────────────────────────────────────────────────────────────
# =============================================================================
Analysis = namedtuple('Analysis', 'tree tokens lex_errors parse_errors scopes')


def analyze(source):
    """Lex and parse `source`; the tree is None only after an internal fault."""
    lexer = Lexer(source)
    toks = lexer.scan()
    parser = Parser(toks)
    tree = parser.parse()
    return Analysis(tree, toks, lexer.errors, parser.errors, parser.scopes)


def format_diagnostics(result):
    lines = [f"lexical error at {d.line}:{d.col} - {d.message}" for d in result.lex_errors]
    lines += [f"syntax error at {d.line}:{d.col} - {d.message}" for d in result.parse_errors]
    return lines


def symbol_lines(scopes):
    for e in scopes.entries:
        if e.kind in READY_KINDS:
            continue
        line = (f"{e.name}\t{e.kind}\t{e.type}\tdepth={e.depth}\t"
                f"const={e.is_const}\tinit={e.initialized}\tat {e.line}:{e.col}")
        outer = scopes.shadowed(e)
        if outer is not None:
            line += f"\tshadows {outer.name} at {outer.line}:{outer.col}"
        yield line


def report(result, title):
    lines = [f"=== {title} ==="]
    if result.tree is not None:
        lines.extend(result.tree.walk())
    diags = format_diagnostics(result)
    if diags:
        lines += ['', '=== ERRORS ==='] + diags
    else:
        lines += ['', 'syntax analysis: OK']
    return '\n'.join(lines) + '\n'

# =============================================================================
#  8.  CLI  ───────────────────────────────────────────────────────────────────
# =============================================================================

def main(argv=None):
    ap = argparse.ArgumentParser(description="Tiny-C++ analyser and flowchart generator")
    ap.add_argument('file', help="C++ source file to analyse")
    ap.add_argument('--emit', choices=['tokens', 'ast', 'symbols', 'dot', 'mermaid'],
                    default='ast', help="what to print (default: parse tree)")
    ap.add_argument('--name', default='Flowchart', help="diagram name")
    ap.add_argument('-o', '--output', help="write the result to a file instead of stdout")
    ap.add_argument('--log', help="also write a full analysis report to this file")
    args = ap.parse_args(argv)

    if not os.path.isfile(args.file):
        print(f"error: file '{args.file}' not found", file=sys.stderr)
        return 2

    with open(args.file, encoding='utf-8') as f:
        code = f.read()

    result = analyze(code)

    # report accumulated diagnostics -------------------------------------------
    for line in format_diagnostics(result):
        print(line, file=sys.stderr)

    if args.log:
        with open(args.log, 'w', encoding='utf-8') as f:
            f.write(report(result, f"File: {args.file}"))

    if args.emit == 'tokens':
        text = '\n'.join(f"{t.line}:{t.col}\t{t.type}\t{t.value!r}" for t in result.tokens)
    elif args.emit == 'symbols':
        text = '\n'.join(symbol_lines(result.scopes))
    elif args.emit == 'ast':
        if result.tree is None:
            text = '(no parse tree)'
        else:
            text = '\n'.join(result.tree.walk())
    else:
        if result.tree is None:
            print("error: no parse tree, flowchart not generated", file=sys.stderr)
            return 1
        text = synthesize(result.tree, args.name, args.emit)

    if not text.endswith('\n'):
        text += '\n'
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
    else:
        sys.stdout.write(text)

    return 1 if result.tree is None else 0

# =============================================================================
if __name__ == '__main__':
    sys.exit(main())
