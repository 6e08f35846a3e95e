"""Tests for the recursive-descent parser and its in-line diagnostics."""

from cpp_flowchart import (Assign, Binary, Block, Delete, DoWhile, ExprStmt, For, FuncDef, If,
                           Index, InitList, Lexer, Literal, New, Parser, Program, Return,
                           VarDecl, While)


def parse(code):
    parser = Parser(Lexer(code).scan())
    tree = parser.parse()
    return tree, parser


def messages(parser):
    return [e.message for e in parser.errors]


def test_well_formed_declarations_have_no_diagnostics():
    tree, parser = parse("int x = 5; double y = x;")
    assert messages(parser) == []
    assert isinstance(tree, Program)
    assert [(d.type_name, d.name) for d in tree.body] == [("int", "x"), ("double", "y")]
    assert parser.scopes.lookup("x").type == "int"
    assert parser.scopes.lookup("y").initialized


def test_int_and_bool_declarations_are_initialized():
    _, parser = parse("int x = 5; bool f = true;")
    assert messages(parser) == []
    x, f = parser.scopes.lookup("x"), parser.scopes.lookup("f")
    assert (x.type, f.type) == ("int", "bool")
    assert x.initialized and f.initialized


def test_uninitialized_then_mismatched_assignment():
    _, parser = parse('int x; x = "hi";')
    assert "type mismatch in assignment to 'x': int = string" in messages(parser)


def test_assignment_type_mismatch_names_variable():
    _, parser = parse('int x = 5; x = "hi";')
    assert messages(parser) == ["type mismatch in assignment to 'x': int = string"]


def test_initialization_is_not_symmetric():
    _, parser = parse("double d = 1; int i = 2.5;")
    assert messages(parser) == ["type mismatch in initialization of 'i': int = double"]


def test_assigning_const_reports_exactly_once():
    _, parser = parse("const int c = 1; c = 2;")
    assert messages(parser) == ["cannot assign to const variable 'c'"]


def test_const_increment_is_rejected():
    _, parser = parse("const int c = 1; c++;")
    assert messages(parser) == ["cannot increment or decrement const variable 'c'"]


def test_const_needs_initializer():
    _, parser = parse("const int k;")
    assert messages(parser) == ["const variable 'k' must be initialized"]


def test_assignment_target_is_still_checked_for_use():
    _, parser = parse("int x; x = 5; int y = x;")
    assert messages(parser) == ["use of uninitialized variable 'x'"]


def test_undeclared_identifier():
    _, parser = parse("int y = z + 1;")
    assert "use of undeclared identifier 'z'" in messages(parser)


def test_inner_block_shadows_without_diagnostics():
    tree, parser = parse("int x = 1; { double x = 2.0; } x = 3;")
    assert messages(parser) == []
    assert isinstance(tree.body[1], Block)
    assert parser.scopes.lookup("x").type == "int"


def test_redeclaration_in_same_scope():
    _, parser = parse("int x = 1; int x = 2;")
    assert messages(parser) == ["redeclaration of 'x' in the same scope"]


def test_program_with_includes_and_function():
    code = (
        "#include <iostream>\n"
        "using namespace std;\n"
        "int main() {\n"
        "    cout << \"hi\" << endl;\n"
        "    return 0;\n"
        "}\n"
    )
    tree, parser = parse(code)
    assert messages(parser) == []
    assert len(tree.body) == 1
    main = tree.body[0]
    assert isinstance(main, FuncDef)
    assert (main.ret_type, main.name) == ("int", "main")
    stmt, ret = main.body.body
    assert isinstance(stmt, ExprStmt) and isinstance(stmt.expr, Binary)
    assert stmt.expr.op == "<<"
    assert isinstance(ret, Return) and ret.value.value == "0"
    assert parser.scopes.lookup("main").kind == "func"


def test_for_loop_variable_is_scoped_to_loop():
    code = "int s = 0; for (int i = 0; i < 10; i++) { s = s + i; } i = 1;"
    tree, parser = parse(code)
    assert messages(parser) == ["use of undeclared identifier 'i'"]
    loop = tree.body[1]
    assert isinstance(loop, For)
    assert isinstance(loop.init, VarDecl)
    assert loop.cond.op == "<"
    assert loop.step.op == "++"


def test_for_with_empty_header():
    tree, parser = parse("for (;;) { break; }")
    assert messages(parser) == []
    loop = tree.body[0]
    assert loop.init is None and loop.cond is None and loop.step is None


def test_while_and_do_while():
    tree, parser = parse("int n = 0; while (n < 3) n = n + 1; do { n++; } while (n < 6);")
    assert messages(parser) == []
    assert isinstance(tree.body[1], While)
    assert isinstance(tree.body[2], DoWhile)
    assert tree.body[2].cond.op == "<"


def test_if_else_branches():
    tree, parser = parse("int a = 1; int b = 2; int x = 0; if (a > b) { x = a; } else { x = b; }")
    assert messages(parser) == []
    stmt = tree.body[3]
    assert isinstance(stmt, If)
    assert isinstance(stmt.then, Block) and isinstance(stmt.orelse, Block)


def test_arrays_new_and_delete():
    code = "int a[5] = {1, 2, 3}; int* p = new int[4]; int v = a[0]; delete[] p;"
    tree, parser = parse(code)
    assert messages(parser) == []
    arr, ptr, val, rm = tree.body
    assert arr.dims == "[]"
    assert isinstance(arr.init, InitList) and len(arr.init.items) == 3
    assert ptr.type_name == "int*"
    assert isinstance(ptr.init, New) and ptr.init.type_name == "int"
    assert isinstance(val.init, Index)
    assert isinstance(rm, Delete) and rm.is_array
    assert parser.scopes.lookup("a").type == "int[]"


def test_template_arguments_are_skipped():
    tree, parser = parse("vector<vector<int>> grid;")
    assert messages(parser) == []
    assert (tree.body[0].type_name, tree.body[0].name) == ("vector", "grid")


def test_assignment_is_right_associative():
    tree, _ = parse("int a = 0; int b = 0; a = b = 1;")
    expr = tree.body[2].expr
    assert isinstance(expr, Assign)
    assert isinstance(expr.value, Assign)


def test_precedence():
    tree, _ = parse("int r = 1 + 2 * 3;")
    init = tree.body[0].init
    assert init.op == "+"
    assert init.rhs.op == "*"


def test_missing_paren_after_while_recovers():
    code = "int main() { int x = 3; while (x > 0 { x = x - 1; } return 0; }"
    tree, parser = parse(code)
    assert messages(parser) == ["expected ')' after while condition"]
    kinds = [type(s) for s in tree.body[0].body.body]
    assert kinds == [VarDecl, While, Return]


def test_if_without_parentheses():
    tree, parser = parse("int x = 2; if x > 1) { x = 0; }")
    assert messages(parser) == ["expected '(' after 'if', parsing condition without parentheses"]
    assert tree.body[1].cond.op == ">"


def test_missing_semicolon_after_return():
    _, parser = parse("int main() { return 0 }")
    assert messages(parser) == ["expected ';' after return"]


def test_repeated_expectation_failures_are_suppressed():
    _, parser = parse("int f() { return 1 ")
    assert messages(parser) == ["expected ';' after return"]


def test_const_without_type():
    _, parser = parse("const x = 1;")
    assert messages(parser) == [
        "expected a type after 'const'",
        "use of undeclared identifier 'x'",
    ]


def test_const_function_is_rejected():
    tree, parser = parse("const int f() { return 1; }")
    assert messages(parser) == ["'const' cannot be applied to a function declaration"]
    assert isinstance(tree.body[0], FuncDef)


def test_function_parameters_are_not_bound():
    _, parser = parse("int f(int a) { return a; }")
    assert messages(parser) == ["use of undeclared identifier 'a'"]
    assert parser.scopes.lookup("a") is None


def test_using_directive_needs_semicolon():
    tree, parser = parse("using namespace std\nint x = 1;")
    assert [(e.line, e.col, e.message) for e in parser.errors] == [
        (2, 1, "expected ';' after using directive"),
    ]
    assert isinstance(tree.body[0], VarDecl)


def test_new_without_type_is_error_literal():
    tree, parser = parse("new 5;")
    assert messages(parser) == ["expected a type after 'new'"]
    expr = tree.body[0].expr
    assert isinstance(expr, Literal)
    assert (expr.kind, expr.value) == ("error", "new")


def test_missing_function_brace_is_a_warning():
    tree, parser = parse("int main() return 0;")
    assert messages(parser) == ["warning: missing '{' after function declaration, assuming a body"]
    assert isinstance(tree.body[0].body.body[0], Return)


def test_bad_expression_becomes_error_literal():
    tree, parser = parse("int main() { ) ; return 0; }")
    assert "expected expression, got ')'" in messages(parser)
    first = tree.body[0].body.body[0]
    assert isinstance(first.expr, Literal) and first.expr.kind == "error"


def test_internal_fault_yields_no_tree(monkeypatch):
    def boom(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(Parser, "parse_program", boom)
    tree, parser = parse("int x = 1;")
    assert tree is None
    assert [(e.line, e.col, e.message) for e in parser.errors] == [
        (-1, -1, "internal parser error: boom"),
    ]


def test_walk_prints_indented_tree():
    tree, _ = parse("int x = 1 + 2;")
    assert list(tree.walk()) == [
        "Program",
        "  VarDecl int x",
        "    Binary '+'",
        "      Literal number 1",
        "      Literal number 2",
    ]
