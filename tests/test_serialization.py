"""Tests for AST JSON and YAML serialization."""

import json
import pytest

from sv_loop_parser.ast import (
    getASTfromString,
    ast_to_dict,
    ast_to_json,
    ast_from_dict,
    ast_from_json,
    ast_to_yaml,
    ast_from_yaml,
)
from sv_loop_parser.ast.builder import Position
from sv_loop_parser.ast.nodes import (
    Identifier,
    NumberLiteral,
    NullStatement,
    LoopForever,
    LoopFor,
    LoopForeach,
    LoopVariables,
    ForInitDeclarationList,
)


def _pos(line=1, column=1):
    """Helper to create a Position for testing."""
    return Position(origin="<test>", line=line, column=column)


class TestAstToDict:
    """Tests for ast_to_dict function."""

    def test_none_input(self):
        """Test that None input returns None."""
        assert ast_to_dict(None) is None

    def test_single_node(self):
        """Test serializing a single node."""
        node = NumberLiteral(text="8'hFF", position=_pos(2, 5))
        result = ast_to_dict(node)

        assert result["_type"] == "NumberLiteral"
        assert result["text"] == "8'hFF"
        assert result["_position"] == {"origin": "<test>", "line": 2, "column": 5}

    def test_without_position(self):
        """Test serializing without position information."""
        node = LoopForever(body=NullStatement(position=_pos()), position=_pos())
        result = ast_to_dict(node, include_position=False)

        assert "_position" not in result
        assert "_position" not in result["body"]
        assert result == {
            "_type": "LoopForever",
            "body": {"_type": "NullStatement", "attributes": []},
        }

    def test_tuples_become_lists(self):
        """Test that tuple fields are serialized as lists."""
        ast = getASTfromString("for (i = 0; i < 4; i++, j--) ;")
        result = ast_to_dict(ast, include_position=False)

        assert isinstance(result["step"], list)
        assert [s["_type"] for s in result["step"]] == ["ForStepIncOrDec", "ForStepIncOrDec"]
        assert result["initialization"]["_type"] == "ForInitAssignmentList"

    def test_absent_clauses_are_null(self):
        """Test that missing for clauses serialize as None."""
        result = ast_to_dict(getASTfromString("for (;;) ;"), include_position=False)
        assert result["initialization"] is None
        assert result["condition"] is None
        assert result["step"] is None

    def test_unbound_slots(self):
        """Test that unbound loop-variable slots are kept as None."""
        ast = getASTfromString("foreach (arr[i, , j]) f;")
        slots = ast_to_dict(ast, include_position=False)["variables"]["slots"]

        assert slots[0] == {"_type": "Identifier", "name": "i"}
        assert slots[1] is None
        assert slots[2] == {"_type": "Identifier", "name": "j"}

    def test_unsupported_value(self):
        """Test that unsupported field values raise TypeError."""
        node = NumberLiteral(text=object(), position=_pos())
        with pytest.raises(TypeError):
            ast_to_dict(node)


class TestAstFromDict:
    """Tests for ast_from_dict function."""

    def test_none_input(self):
        assert ast_from_dict(None) is None

    def test_single_node(self):
        data = {
            "_type": "Identifier",
            "_position": {"origin": "x.sv", "line": 3, "column": 4},
            "name": "count",
        }
        node = ast_from_dict(data)

        assert isinstance(node, Identifier)
        assert node.name == "count"
        assert node.position == Position(origin="x.sv", line=3, column=4)

    def test_without_position(self):
        """Test deserializing without position (uses default)."""
        node = ast_from_dict({"_type": "NumberLiteral", "text": "42"})

        assert isinstance(node, NumberLiteral)
        assert node.text == "42"
        assert node.position.origin == "<unknown>"
        assert node.position.line == 0
        assert node.position.column == 0

    def test_lists_become_tuples(self):
        data = {
            "_type": "LoopVariables",
            "slots": [None, {"_type": "Identifier", "name": "k"}],
        }
        node = ast_from_dict(data)

        assert isinstance(node, LoopVariables)
        assert isinstance(node.slots, tuple)
        assert node.slots[0] is None
        assert node.slots[1].name == "k"

    def test_missing_type(self):
        with pytest.raises(ValueError, match="Missing '_type'"):
            ast_from_dict({"name": "x"})

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown node type: Bogus"):
            ast_from_dict({"_type": "Bogus"})

    def test_abstract_type_is_unknown(self):
        with pytest.raises(ValueError, match="Unknown node type"):
            ast_from_dict({"_type": "LoopStatement"})

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown field 'colour'"):
            ast_from_dict({"_type": "Identifier", "name": "x", "colour": "red"})

    def test_missing_field(self):
        with pytest.raises(ValueError, match="Malformed data"):
            ast_from_dict({"_type": "LoopWhile", "condition": None})

    def test_malformed_position(self):
        with pytest.raises(ValueError, match="Malformed position"):
            ast_from_dict({"_type": "Identifier", "name": "x", "_position": {"line": 1}})

    def test_non_dict_node(self):
        with pytest.raises(ValueError):
            ast_from_dict(["_type", "Identifier"])


class TestRoundTrip:
    """Serialized trees rebuild to equal trees."""

    @pytest.mark.parametrize("code", [
        "forever ;",
        "repeat (n * 2) begin : blk tick; end : blk",
        "for (var logic [3:0] a = 0, b = 15; a < b; a++, b--) swap(a, b);",
        "do $display(\"tick\"); while (!done);",
        "foreach (this.entries[, k]) retry: (* weight = 2 *) x[k +: 4] = {a, b};",
    ])
    def test_json(self, code):
        ast = getASTfromString(code, origin="rt.sv")
        restored = ast_from_json(ast_to_json(ast))
        assert restored == ast

    def test_json_compact(self):
        ast = getASTfromString("for (int i = 0; i < 4; i++) ;")
        text = ast_to_json(ast, include_position=False, indent=None)
        assert "\n" not in text
        assert json.loads(text)["_type"] == "LoopFor"
        restored = ast_from_json(text)
        assert isinstance(restored.initialization, ForInitDeclarationList)
        assert str(restored) == str(ast)

    def test_yaml(self):
        pytest.importorskip("yaml")
        ast = getASTfromString("foreach (arr[i, , j]) stmt;")
        text = ast_to_yaml(ast)
        assert "LoopForeach" in text
        restored = ast_from_yaml(text)
        assert isinstance(restored, LoopForeach)
        assert restored == ast

    def test_without_position_keeps_structure(self):
        ast = getASTfromString("for (i = 0; i < 4; i++) ;")
        restored = ast_from_dict(ast_to_dict(ast, include_position=False))
        assert isinstance(restored, LoopFor)
        assert str(restored) == str(ast)
        assert restored.position.origin == "<unknown>"
