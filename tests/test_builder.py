"""Tests for ASTBuilderVisitor edge cases and error handling."""

import pytest
from arpeggio import NonTerminal

from sv_loop_parser import getLoopStatementParser
from sv_loop_parser.ast.builder import ASTBuilderVisitor, Position
from sv_loop_parser.ast.nodes import (
    LoopForever,
    LoopFor,
    NullStatement,
    ForStepIncOrDec,
)


class TestPosition:
    """Test Position class edge cases."""

    def test_position_fields(self):
        pos = Position(origin="test.sv", line=2, column=5)
        assert pos.origin == "test.sv"
        assert pos.line == 2
        assert pos.column == 5

    def test_position_repr(self):
        pos = Position(origin="file.sv", line=3, column=7)
        assert repr(pos) == "file.sv:3:7"


class TestASTBuilderVisitor:
    """Test ASTBuilderVisitor directly on parse trees."""

    def test_visit_node_with_none(self):
        visitor = ASTBuilderVisitor(getLoopStatementParser())
        assert visitor._visit_node(None) is None

    def test_visit_parse_tree(self):
        parser = getLoopStatementParser()
        tree = parser.parse("forever ;")
        ast = ASTBuilderVisitor(parser, origin="unit.sv").visit_parse_tree(tree)
        assert isinstance(ast, LoopForever)
        assert isinstance(ast.body, NullStatement)
        assert ast.position.origin == "unit.sv"

    def test_prefix_tree(self):
        parser = getLoopStatementParser(require_eof=False)
        tree = parser.parse("for (;; i++) ; tail")
        ast = ASTBuilderVisitor(parser).visit_parse_tree(tree)
        assert isinstance(ast, LoopFor)
        assert isinstance(ast.step[0], ForStepIncOrDec)

    def test_default_origin(self):
        parser = getLoopStatementParser()
        ast = ASTBuilderVisitor(parser).visit_parse_tree(parser.parse("forever ;"))
        assert ast.position.origin == "<string>"

    def test_unexpected_for_shape(self):
        """A for-loop node without its two header semicolons is rejected."""
        parser = getLoopStatementParser()
        tree = parser.parse("for (;;) ;")
        for_node = tree[0][0]
        assert for_node.rule_name == "loop_statement_for"
        broken = NonTerminal(for_node.rule, [child for child in for_node if child.value != ";"])
        visitor = ASTBuilderVisitor(parser)
        with pytest.raises(ValueError, match="semicolons"):
            visitor._visit_node(broken)

    def test_single_child_check(self):
        visitor = ASTBuilderVisitor(getLoopStatementParser())
        with pytest.raises(ValueError, match="exactly one"):
            visitor._single([], LoopForever, "loop_statement")
