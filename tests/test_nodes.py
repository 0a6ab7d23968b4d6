"""Tests for AST node classes: rendering, immutability and child ordering."""

import dataclasses

import pytest

from sv_loop_parser.ast import getASTfromString, Position
from sv_loop_parser.ast.nodes import (
    ASTNode,
    Identifier,
    HierarchicalIdentifier,
    ScopedIdentifier,
    PackageScope,
    NumberLiteral,
    VariableReference,
    BinaryOp,
    UnaryOp,
    IncOrDecExpression,
    VariableAssignment,
    OperatorAssignment,
    IntegerAtomType,
    Statement,
    NullStatement,
    SubroutineCallStatement,
    TfCall,
    VarKeyword,
    ForVariableBinding,
    ForVariableDeclaration,
    ForInitAssignmentList,
    ForInitDeclarationList,
    ForStepOperatorAssignment,
    ForStepIncOrDec,
    ForStepSubroutineCall,
    LoopVariables,
    LoopStatement,
    LoopForever,
    LoopRepeat,
    LoopWhile,
    LoopFor,
    LoopDoWhile,
    LoopForeach,
    LOOP_STATEMENT_TYPES,
    FOR_INITIALIZATION_TYPES,
    FOR_STEP_TYPES,
)


def _pos(line=1, column=1):
    """Helper to create a Position for testing."""
    return Position(origin="<test>", line=line, column=column)


def _ident(name):
    return Identifier(name=name, position=_pos())


def _ref(name):
    path = HierarchicalIdentifier(root=False, path=(_ident(name),), position=_pos())
    return VariableReference(
        name=ScopedIdentifier(scope=None, name=path, position=_pos()),
        position=_pos()
    )


def _num(text):
    return NumberLiteral(text=text, position=_pos())


def _call_stmt(name):
    path = HierarchicalIdentifier(root=False, path=(_ident(name),), position=_pos())
    call = TfCall(name=ScopedIdentifier(scope=None, name=path, position=_pos()), position=_pos())
    item = SubroutineCallStatement(call=call, position=_pos())
    return Statement(label=None, attributes=(), item=item, position=_pos())


class TestPosition:
    """Test Position value semantics."""

    def test_position_repr(self):
        pos = Position(origin="file.sv", line=3, column=7)
        assert repr(pos) == "file.sv:3:7"

    def test_position_equality(self):
        assert Position("a.sv", 1, 2) == Position("a.sv", 1, 2)
        assert Position("a.sv", 1, 2) != Position("b.sv", 1, 2)


class TestImmutability:
    """Nodes cannot be changed after construction."""

    def test_frozen_loop(self):
        node = LoopForever(body=NullStatement(position=_pos()), position=_pos())
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.body = None

    def test_frozen_identifier(self):
        ident = _ident("i")
        with pytest.raises(dataclasses.FrozenInstanceError):
            ident.name = "j"

    def test_sequences_are_tuples(self):
        ast = getASTfromString("for (int i = 0, j = 1; i < j; i++, j--) ;")
        assert isinstance(ast.step, tuple)
        assert isinstance(ast.initialization.declarations, tuple)
        assert isinstance(ast.initialization.declarations[0].bindings, tuple)

    def test_hashable(self):
        ast = getASTfromString("foreach (arr[i, , j]) f;")
        assert hash(ast) == hash(getASTfromString("foreach (arr[i, , j]) f;"))


class TestNodesOrdering:
    """`nodes` returns children in production order."""

    def test_forever(self):
        body = NullStatement(position=_pos())
        assert LoopForever(body=body, position=_pos()).nodes == (body,)

    def test_repeat(self):
        count, body = _num("4"), _call_stmt("tick")
        assert LoopRepeat(count=count, body=body, position=_pos()).nodes == (count, body)

    def test_while(self):
        cond, body = _ref("busy"), _call_stmt("tick")
        assert LoopWhile(condition=cond, body=body, position=_pos()).nodes == (cond, body)

    def test_do_while_body_first(self):
        cond, body = _ref("busy"), _call_stmt("tick")
        node = LoopDoWhile(body=body, condition=cond, position=_pos())
        assert node.nodes == (body, cond)

    def test_for(self):
        ast = getASTfromString("for (i = 0; i < 4; i++) ;")
        assert ast.nodes == (ast.initialization, ast.condition, ast.step, ast.body)

    def test_for_empty_clauses(self):
        ast = getASTfromString("for (;;) ;")
        assert ast.nodes[:3] == (None, None, None)

    def test_foreach(self):
        ast = getASTfromString("foreach (arr[i]) f;")
        assert ast.nodes == (ast.array, ast.variables, ast.body)

    def test_declaration(self):
        var = VarKeyword(position=_pos())
        data_type = IntegerAtomType(keyword="int", position=_pos())
        bindings = (ForVariableBinding(name=_ident("i"), init=_num("0"), position=_pos()),)
        decl = ForVariableDeclaration(var=var, data_type=data_type, bindings=bindings, position=_pos())
        assert decl.nodes == (var, data_type, bindings)

    def test_base_class_is_abstract(self):
        with pytest.raises(NotImplementedError):
            LoopStatement(position=_pos()).nodes
        with pytest.raises(NotImplementedError):
            str(ASTNode(position=_pos()))


class TestVariantSets:
    """The closed variant tuples name every variant."""

    def test_loop_statement_types(self):
        assert LOOP_STATEMENT_TYPES == (
            LoopForever, LoopRepeat, LoopWhile, LoopFor, LoopDoWhile, LoopForeach,
        )
        assert all(issubclass(cls, LoopStatement) for cls in LOOP_STATEMENT_TYPES)

    def test_for_initialization_types(self):
        assert FOR_INITIALIZATION_TYPES == (ForInitAssignmentList, ForInitDeclarationList)

    def test_for_step_types(self):
        assert FOR_STEP_TYPES == (ForStepOperatorAssignment, ForStepIncOrDec, ForStepSubroutineCall)


class TestStr:
    """String rendering of nodes."""

    def test_loop_variables(self):
        slots = (_ident("i"), None, _ident("j"))
        assert str(LoopVariables(slots=slots, position=_pos())) == "i, , j"
        assert str(LoopVariables(slots=(None,), position=_pos())) == ""

    def test_binary_op_parenthesizes_nested(self):
        inner = BinaryOp(op="+", left=_ref("a"), right=_ref("b"), position=_pos())
        outer = BinaryOp(op="*", left=inner, right=_ref("c"), position=_pos())
        assert str(outer) == "(a + b) * c"

    def test_unary_op(self):
        assert str(UnaryOp(op="!", operand=_ref("done"), position=_pos())) == "!done"

    def test_stacked_unary_ops_keep_a_gap(self):
        inner = UnaryOp(op="-", operand=_num("1"), position=_pos())
        assert str(UnaryOp(op="-", operand=inner, position=_pos())) == "- -1"
        pre = IncOrDecExpression(lvalue=_ref("i"), operator="--", prefix=True, position=_pos())
        assert str(UnaryOp(op="-", operand=pre, position=_pos())) == "- --i"
        post = IncOrDecExpression(lvalue=_ref("i"), operator="++", prefix=False, position=_pos())
        assert str(UnaryOp(op="-", operand=post, position=_pos())) == "-i++"

    def test_inc_or_dec(self):
        post = IncOrDecExpression(lvalue=_ref("i"), operator="++", prefix=False, position=_pos())
        pre = IncOrDecExpression(lvalue=_ref("i"), operator="--", prefix=True, position=_pos())
        assert str(post) == "i++"
        assert str(pre) == "--i"

    def test_assignments(self):
        assert str(VariableAssignment(lvalue=_ref("i"), expr=_num("0"), position=_pos())) == "i = 0"
        op = OperatorAssignment(lvalue=_ref("acc"), operator="+=", expr=_ref("x"), position=_pos())
        assert str(op) == "acc += x"

    def test_package_scope(self):
        assert str(PackageScope(name="pkg", position=_pos())) == "pkg::"

    def test_for_with_empty_clauses(self):
        node = LoopFor(
            initialization=None, condition=None, step=None,
            body=NullStatement(position=_pos()), position=_pos()
        )
        assert str(node) == "for (;;) ;"

    @pytest.mark.parametrize("code", [
        "forever ;",
        "repeat (n * 2) begin : blk tick; end : blk",
        "while (a && !b) if (c) break; else continue;",
        "for (int i = 0; i < 10; i++) $display(i);",
        "for (var logic [3:0] a = 0, b = 15; a < b; a++, b--) swap(a, b);",
        "for (i = 0, j = 1;; i += 2, advance()) ;",
        "do x = x - 1; while (x > 0);",
        "foreach (arr[i, , j]) stmt;",
        "foreach (pkg::table[]) x = 0;",
        "foreach (this.super.entries[k]) x = 0;",
        "foreach ($root.tb.mem[a, b]) mem[a][b] = 8'h0;",
        "forever retry: (* full_case *) x = 1;",
        "while (a ? b : c) {hi, lo} = {lo, hi};",
        "forever log(.msg(\"x\"), .level(), 2);",
        "while (- -1) ;",
        "while (- -x) ;",
        "while (& &x) ;",
        "while (~ &mask) ;",
        "while (- --i) ;",
    ])
    def test_render_is_canonical(self, code):
        ast = getASTfromString(code)
        assert ast is not None
        rendered = str(ast)
        assert rendered == code
        assert getASTfromString(rendered) == ast

    def test_render_normalizes_whitespace(self):
        ast = getASTfromString("for(int i=0;i<4;i++)\n   foo ;")
        assert str(ast) == "for (int i = 0; i < 4; i++) foo;"
