"""Tests for the block-scoped symbol table."""

from cpp_flowchart import ScopeManager


def test_builtins_live_in_global_scope():
    scopes = ScopeManager()
    cout = scopes.lookup("cout")
    assert cout.kind == "std"
    assert cout.type == "ostream"
    assert cout.depth == 0
    assert cout.initialized
    assert scopes.lookup("vector").kind == "type"
    assert scopes.errors == []


def test_duplicate_in_same_scope_keeps_first():
    scopes = ScopeManager()
    first = scopes.declare("x", "var", "int", line=1, col=5)
    again = scopes.declare("x", "var", "double", line=2, col=8)
    assert again is first
    assert scopes.lookup("x").type == "int"
    assert [(e.line, e.col, e.message) for e in scopes.errors] == [
        (2, 8, "redeclaration of 'x' in the same scope"),
    ]


def test_inner_declaration_shadows_and_exit_restores():
    scopes = ScopeManager()
    outer = scopes.declare("x", "var", "int", line=1, col=5)
    scopes.enter_scope()
    inner = scopes.declare("x", "var", "double", line=3, col=9)

    assert scopes.lookup("x") is inner
    assert inner.depth == 1
    assert scopes.shadowed(inner) is outer
    assert scopes.shadowed(outer) is None

    scopes.exit_scope()
    assert scopes.lookup("x") is outer
    assert scopes.errors == []


def test_lookup_sees_enclosing_scopes():
    scopes = ScopeManager()
    scopes.declare("n", "var", "int")
    scopes.enter_scope()
    scopes.enter_scope()
    assert scopes.depth == 2
    assert scopes.lookup("n").depth == 0
    assert scopes.lookup("missing") is None


def test_global_scope_cannot_be_exited():
    scopes = ScopeManager()
    scopes.exit_scope()
    scopes.exit_scope()
    assert scopes.depth == 0
    assert scopes.lookup("cout") is not None


def test_require_reports_undeclared_and_uninitialized():
    scopes = ScopeManager()
    scopes.declare("x", "var", "int")
    assert scopes.require("y", 4, 2) is None
    assert scopes.require("x", 5, 3).name == "x"
    assert scopes.require("cout", 6, 1).kind == "std"
    assert [e.message for e in scopes.errors] == [
        "use of undeclared identifier 'y'",
        "use of uninitialized variable 'x'",
    ]


def test_errors_go_to_shared_list():
    errors = []
    scopes = ScopeManager(errors)
    scopes.require("ghost", 1, 1)
    assert len(errors) == 1


def test_entries_arena_records_every_declaration():
    scopes = ScopeManager()
    before = len(scopes.entries)
    a = scopes.declare("a", "var", "int")
    scopes.enter_scope()
    b = scopes.declare("a", "var", "int")
    scopes.exit_scope()
    assert scopes.entries[before:] == [a, b]
    assert b.shadowed == a.index
