from __future__ import annotations

from dataclasses import dataclass

from arpeggio import PTNodeVisitor, Terminal

from .nodes import (
    ASTNode,
    Identifier,
    HierarchicalIdentifier,
    PackageScope,
    ClassHandle,
    ScopedIdentifier,
    Expression,
    NumberLiteral,
    StringLiteral,
    Select,
    VariableReference,
    Concatenation,
    UnaryOp,
    BinaryOp,
    ConditionalOp,
    IncOrDecExpression,
    NamedArgument,
    SubroutineCall,
    TfCall,
    SystemTfCall,
    VariableAssignment,
    OperatorAssignment,
    PackedDimension,
    DataType,
    IntegerVectorType,
    IntegerAtomType,
    BuiltinType,
    NamedType,
    AttrSpec,
    AttributeInstance,
    StatementItem,
    Statement,
    NullStatement,
    SeqBlock,
    ConditionalStatement,
    JumpStatement,
    BlockingAssignment,
    IncOrDecStatement,
    SubroutineCallStatement,
    VarKeyword,
    ForVariableBinding,
    ForVariableDeclaration,
    ForInitialization,
    ForInitAssignmentList,
    ForInitDeclarationList,
    ForStepAssignment,
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
)


@dataclass(frozen=True)
class Position:
    """Represents a position in source code.

    Attributes:
        origin: Where the source came from (file path, "<string>", ...).
        line: 1-indexed line number.
        column: 1-indexed column number.
    """
    origin: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.origin}:{self.line}:{self.column}"


_STATEMENT_TYPES = (Statement, NullStatement)


class ASTBuilderVisitor(PTNodeVisitor):
    """
    Visits the parse tree generated by the PEG grammar in grammar.py and builds the AST defined in nodes.py.

    Terminals visit to their matched text unless a `visit_<rule>` method
    exists for them. Lists returned by visit methods are spliced into the
    parent's children. Punctuation and keywords therefore reach the visit
    methods as plain strings, which is how clause boundaries (`;` in a for
    header, `,` between loop-variable slots) are located.
    """

    def __init__(self, parser, origin="<string>"):
        """Initialize the visitor with the parser and an origin name.

        Args:
            parser: The Arpeggio parser instance (needed for position conversion)
            origin: Origin identifier recorded in every node's Position
        """
        super().__init__()
        self.parser = parser
        self.origin = origin

    def visit_parse_tree(self, parse_tree):
        """Visit a parse tree and return the AST.

        Args:
            parse_tree: The root node of an Arpeggio parse tree

        Returns:
            The AST node for the root rule
        """
        return self._visit_node(parse_tree)

    def _visit_node(self, node):
        if node is None:
            return None

        visit_method = getattr(self, f"visit_{node.rule_name}", None)

        if isinstance(node, Terminal):
            if visit_method is not None:
                return visit_method(node, [])
            return node.value

        children = []
        for child in node:
            child_ast = self._visit_node(child)
            if child_ast is None:
                continue
            if isinstance(child_ast, list):
                children.extend(child_ast)
            else:
                children.append(child_ast)

        if visit_method is not None:
            return visit_method(node, children)
        # Rules without a visit method pass their single child through
        if len(children) == 1:
            return children[0]
        return children

    def _get_node_position(self, node) -> Position:
        line, column = self.parser.pos_to_linecol(node.position)
        return Position(origin=self.origin, line=line, column=column)

    @staticmethod
    def _nodes(children, cls=ASTNode) -> tuple:
        return tuple(child for child in children if isinstance(child, cls))

    @staticmethod
    def _single(children, cls, rule):
        found = [child for child in children if isinstance(child, cls)]
        if len(found) != 1:
            raise ValueError(f"{rule} should have exactly one {cls.__name__} child, found {len(found)}")
        return found[0]

    # --- Tokens ---

    def visit_EOF(self, node, children):
        return None

    def visit_TOK_NUMBER(self, node, children):
        return NumberLiteral(text=node.value, position=self._get_node_position(node))

    def visit_TOK_STRING(self, node, children):
        return StringLiteral(val=node.value[1:-1], position=self._get_node_position(node))

    # --- Identifiers ---

    def visit_identifier(self, node, children):
        # identifier rule: (Not(reserved_word), [TOK_ID, TOK_ESCAPED_ID])
        return Identifier(name=children[-1], position=self._get_node_position(node))

    def visit_variable_identifier(self, node, children):
        return children[0]

    def visit_index_variable_identifier(self, node, children):
        return children[0]

    def visit_hierarchical_identifier(self, node, children):
        # hierarchical_identifier rule: (Optional('$root', '.'), OneOrMore(identifier, sep='.'))
        return HierarchicalIdentifier(
            root=children[0] == "$root",
            path=self._nodes(children, Identifier),
            position=self._get_node_position(node)
        )

    def visit_package_scope(self, node, children):
        # package_scope rule: ([$unit, identifier], '::')
        return PackageScope(name=str(children[0]), position=self._get_node_position(node))

    def visit_implicit_class_handle(self, node, children):
        return ClassHandle(keyword=''.join(children), position=self._get_node_position(node))

    def visit_class_qualifier(self, node, children):
        return self._single(children, (PackageScope, ClassHandle), "class_qualifier")

    def _scoped_identifier(self, node, children):
        scopes = self._nodes(children, (PackageScope, ClassHandle))
        return ScopedIdentifier(
            scope=scopes[0] if scopes else None,
            name=self._single(children, HierarchicalIdentifier, node.rule_name),
            position=self._get_node_position(node)
        )

    def visit_ps_or_hierarchical_array_identifier(self, node, children):
        return self._scoped_identifier(node, children)

    def visit_ps_or_hierarchical_tf_identifier(self, node, children):
        return self._scoped_identifier(node, children)

    # --- Loop statements ---

    def visit_loop_statement(self, node, children):
        return self._single(children, LoopStatement, "loop_statement")

    def visit_loop_statement_unit(self, node, children):
        return self._single(children, LoopStatement, "loop_statement_unit")

    def visit_loop_statement_forever(self, node, children):
        # loop_statement_forever rule: ('forever', statement_or_null)
        return LoopForever(
            body=self._single(children, _STATEMENT_TYPES, "loop_statement_forever"),
            position=self._get_node_position(node)
        )

    def visit_loop_statement_repeat(self, node, children):
        # loop_statement_repeat rule: ('repeat', '(', expression, ')', statement_or_null)
        return LoopRepeat(
            count=self._single(children, Expression, "loop_statement_repeat"),
            body=self._single(children, _STATEMENT_TYPES, "loop_statement_repeat"),
            position=self._get_node_position(node)
        )

    def visit_loop_statement_while(self, node, children):
        # loop_statement_while rule: ('while', '(', expression, ')', statement_or_null)
        return LoopWhile(
            condition=self._single(children, Expression, "loop_statement_while"),
            body=self._single(children, _STATEMENT_TYPES, "loop_statement_while"),
            position=self._get_node_position(node)
        )

    def visit_loop_statement_for(self, node, children):
        # loop_statement_for rule:
        #   ('for', '(', [for_initialization], ';', [expression], ';', [for_step], ')', statement_or_null)
        # Only the two header semicolons reach here as strings; the body is already a node.
        semicolons = [i for i, child in enumerate(children) if child == ';']
        if len(semicolons) != 2:
            raise ValueError(f"loop_statement_for should have 2 header semicolons, found {len(semicolons)}")
        first, second = semicolons
        inits = self._nodes(children[:first], ForInitialization)
        conditions = self._nodes(children[first:second], Expression)
        steps = self._nodes(children[second:], ForStepAssignment)
        return LoopFor(
            initialization=inits[0] if inits else None,
            condition=conditions[0] if conditions else None,
            step=steps if steps else None,
            body=self._single(children[second:], _STATEMENT_TYPES, "loop_statement_for"),
            position=self._get_node_position(node)
        )

    def visit_loop_statement_do_while(self, node, children):
        # loop_statement_do_while rule: ('do', statement_or_null, 'while', '(', expression, ')', ';')
        return LoopDoWhile(
            body=self._single(children, _STATEMENT_TYPES, "loop_statement_do_while"),
            condition=self._single(children, Expression, "loop_statement_do_while"),
            position=self._get_node_position(node)
        )

    def visit_loop_statement_foreach(self, node, children):
        # loop_statement_foreach rule: ('foreach', '(', array, loop_variables, ')', statement)
        return LoopForeach(
            array=self._single(children, ScopedIdentifier, "loop_statement_foreach"),
            variables=self._single(children, LoopVariables, "loop_statement_foreach"),
            body=self._single(children, Statement, "loop_statement_foreach"),
            position=self._get_node_position(node)
        )

    def visit_for_initialization(self, node, children):
        return self._single(children, ForInitialization, "for_initialization")

    def visit_for_init_assignments(self, node, children):
        return ForInitAssignmentList(
            assignments=self._nodes(children, VariableAssignment),
            position=self._get_node_position(node)
        )

    def visit_for_init_declarations(self, node, children):
        return ForInitDeclarationList(
            declarations=self._nodes(children, ForVariableDeclaration),
            position=self._get_node_position(node)
        )

    def visit_for_variable_declaration(self, node, children):
        # for_variable_declaration rule: (Optional('var'), data_type, OneOrMore(for_variable_binding, sep=','))
        var = None
        if children[0] == "var":
            var = VarKeyword(position=self._get_node_position(node[0]))
        return ForVariableDeclaration(
            var=var,
            data_type=self._single(children, DataType, "for_variable_declaration"),
            bindings=self._nodes(children, ForVariableBinding),
            position=self._get_node_position(node)
        )

    def visit_for_variable_binding(self, node, children):
        # for_variable_binding rule: (variable_identifier, '=', expression)
        return ForVariableBinding(
            name=self._single(children, Identifier, "for_variable_binding"),
            init=self._single(children, Expression, "for_variable_binding"),
            position=self._get_node_position(node)
        )

    def visit_for_step(self, node, children):
        # Spliced into loop_statement_for's children
        return list(self._nodes(children, ForStepAssignment))

    def visit_for_step_assignment(self, node, children):
        # for_step_assignment rule: [operator_assignment, inc_or_dec_expression, function_subroutine_call]
        child = children[0]
        position = self._get_node_position(node)
        if isinstance(child, OperatorAssignment):
            return ForStepOperatorAssignment(assignment=child, position=position)
        elif isinstance(child, IncOrDecExpression):
            return ForStepIncOrDec(expr=child, position=position)
        elif isinstance(child, SubroutineCall):
            return ForStepSubroutineCall(call=child, position=position)
        raise ValueError(f"for_step_assignment has unexpected child: {child!r}")

    def visit_loop_variables(self, node, children):
        # loop_variables rule: ('[', [id], ZeroOrMore(',', [id]), ']')
        # Every comma closes a slot; a slot with no identifier stays None.
        slots = []
        current = None
        for child in children[1:-1]:
            if child == ',':
                slots.append(current)
                current = None
            else:
                current = child
        slots.append(current)
        return LoopVariables(slots=tuple(slots), position=self._get_node_position(node))

    # --- Statements ---

    def visit_statement_or_null(self, node, children):
        return self._single(children, _STATEMENT_TYPES, "statement_or_null")

    def visit_null_statement(self, node, children):
        return NullStatement(
            attributes=self._nodes(children, AttributeInstance),
            position=self._get_node_position(node)
        )

    def visit_statement(self, node, children):
        # statement rule: (Optional(statement_label), ZeroOrMore(attribute_instance), statement_item)
        label = children[0] if isinstance(children[0], Identifier) else None
        return Statement(
            label=label,
            attributes=self._nodes(children, AttributeInstance),
            item=self._single(children, StatementItem, "statement"),
            position=self._get_node_position(node)
        )

    def visit_statement_label(self, node, children):
        return children[0]

    def visit_statement_item(self, node, children):
        return self._single(children, StatementItem, "statement_item")

    def visit_seq_block(self, node, children):
        # seq_block rule: ('begin', Optional(':', identifier), ZeroOrMore(statement_or_null), 'end', Optional(':', identifier))
        end_index = children.index("end")
        name = children[2] if children[1] == ':' else None
        end_name = children[end_index + 2] if len(children) > end_index + 2 else None
        return SeqBlock(
            name=name,
            items=self._nodes(children[:end_index], _STATEMENT_TYPES),
            end_name=end_name,
            position=self._get_node_position(node)
        )

    def visit_conditional_statement(self, node, children):
        # conditional_statement rule: ('if', '(', expression, ')', statement_or_null, Optional('else', statement_or_null))
        branches = self._nodes(children, _STATEMENT_TYPES)
        return ConditionalStatement(
            condition=self._single(children, Expression, "conditional_statement"),
            then_branch=branches[0],
            else_branch=branches[1] if len(branches) > 1 else None,
            position=self._get_node_position(node)
        )

    def visit_jump_statement(self, node, children):
        exprs = self._nodes(children, Expression)
        return JumpStatement(
            keyword=children[0],
            expr=exprs[0] if exprs else None,
            position=self._get_node_position(node)
        )

    def visit_blocking_assignment_statement(self, node, children):
        return BlockingAssignment(
            assignment=self._single(children, OperatorAssignment, "blocking_assignment_statement"),
            position=self._get_node_position(node)
        )

    def visit_inc_or_dec_statement(self, node, children):
        return IncOrDecStatement(
            expr=self._single(children, IncOrDecExpression, "inc_or_dec_statement"),
            position=self._get_node_position(node)
        )

    def visit_subroutine_call_statement(self, node, children):
        return SubroutineCallStatement(
            call=self._single(children, SubroutineCall, "subroutine_call_statement"),
            position=self._get_node_position(node)
        )

    def visit_attribute_instance(self, node, children):
        return AttributeInstance(
            specs=self._nodes(children, AttrSpec),
            position=self._get_node_position(node)
        )

    def visit_attr_spec(self, node, children):
        exprs = self._nodes(children, Expression)
        return AttrSpec(
            name=children[0],
            value=exprs[0] if exprs else None,
            position=self._get_node_position(node)
        )

    # --- Data types ---

    def visit_data_type(self, node, children):
        return self._single(children, DataType, "data_type")

    def visit_integer_vector_type(self, node, children):
        # integer_vector_type rule: (keyword, Optional(signing), ZeroOrMore(packed_dimension))
        signing = children[1] if len(children) > 1 and isinstance(children[1], str) else None
        return IntegerVectorType(
            keyword=children[0],
            signing=signing,
            dimensions=self._nodes(children, PackedDimension),
            position=self._get_node_position(node)
        )

    def visit_integer_atom_type(self, node, children):
        return IntegerAtomType(
            keyword=children[0],
            signing=children[1] if len(children) > 1 else None,
            position=self._get_node_position(node)
        )

    def visit_non_integer_type(self, node, children):
        return BuiltinType(keyword=children[0], position=self._get_node_position(node))

    def visit_simple_type(self, node, children):
        return BuiltinType(keyword=children[0], position=self._get_node_position(node))

    def visit_named_type(self, node, children):
        scopes = self._nodes(children, PackageScope)
        return NamedType(
            scope=scopes[0] if scopes else None,
            name=self._single(children, Identifier, "named_type"),
            dimensions=self._nodes(children, PackedDimension),
            position=self._get_node_position(node)
        )

    def visit_packed_dimension(self, node, children):
        # packed_dimension rule: [('[', expression, ':', expression, ']'), ('[', ']')]
        bounds = self._nodes(children, Expression)
        return PackedDimension(
            msb=bounds[0] if bounds else None,
            lsb=bounds[1] if bounds else None,
            position=self._get_node_position(node)
        )

    # --- Assignments ---

    def visit_list_of_variable_assignments(self, node, children):
        # Spliced into for_init_assignments' children
        return list(self._nodes(children, VariableAssignment))

    def visit_variable_assignment(self, node, children):
        # variable_assignment rule: (variable_lvalue, '=', expression)
        return VariableAssignment(
            lvalue=children[0],
            expr=children[-1],
            position=self._get_node_position(node)
        )

    def visit_operator_assignment(self, node, children):
        # operator_assignment rule: (variable_lvalue, assignment_operator, expression)
        return OperatorAssignment(
            lvalue=children[0],
            operator=children[1],
            expr=children[2],
            position=self._get_node_position(node)
        )

    def visit_inc_or_dec_expression(self, node, children):
        # inc_or_dec_expression rule: [(operator, variable_lvalue), (variable_lvalue, operator)]
        prefix = isinstance(children[0], str)
        return IncOrDecExpression(
            lvalue=children[1] if prefix else children[0],
            operator=children[0] if prefix else children[1],
            prefix=prefix,
            position=self._get_node_position(node)
        )

    def visit_variable_lvalue(self, node, children):
        return self._single(children, Expression, "variable_lvalue")

    def visit_lvalue_concatenation(self, node, children):
        return Concatenation(items=self._nodes(children, Expression), position=self._get_node_position(node))

    def visit_variable_reference(self, node, children):
        # variable_reference rule: (Optional(class_qualifier), hierarchical_identifier, ZeroOrMore(select))
        return VariableReference(
            name=self._scoped_identifier(node, children),
            selects=self._nodes(children, Select),
            position=self._get_node_position(node)
        )

    def visit_select(self, node, children):
        # select rule: ('[', expression, Optional(part_select_operator, expression), ']')
        if len(children) == 3:
            return Select(index=children[1], position=self._get_node_position(node))
        return Select(
            index=children[1],
            operator=children[2],
            width=children[3],
            position=self._get_node_position(node)
        )

    # --- Subroutine calls ---

    def visit_function_subroutine_call(self, node, children):
        return self._single(children, SubroutineCall, "function_subroutine_call")

    @staticmethod
    def _call_arguments(children):
        if '(' not in children:
            return None
        return tuple(child for child in children[1:] if isinstance(child, (Expression, NamedArgument)))

    def visit_system_tf_call(self, node, children):
        # system_tf_call rule: ($name, Optional('(', Optional(list_of_arguments), ')'))
        return SystemTfCall(
            name=children[0],
            arguments=self._call_arguments(children),
            position=self._get_node_position(node)
        )

    def visit_tf_call(self, node, children):
        # tf_call rule: (ps_or_hierarchical_tf_identifier, Optional('(', Optional(list_of_arguments), ')'))
        return TfCall(
            name=children[0],
            arguments=self._call_arguments(children),
            position=self._get_node_position(node)
        )

    def visit_tf_call_with_arguments(self, node, children):
        return self.visit_tf_call(node, children)

    def visit_list_of_arguments(self, node, children):
        # Spliced into the call's children
        return [child for child in children if isinstance(child, (Expression, NamedArgument))]

    def visit_argument(self, node, children):
        return children[0]

    def visit_named_argument(self, node, children):
        # named_argument rule: ('.', identifier, '(', Optional(expression), ')')
        exprs = self._nodes(children, Expression)
        return NamedArgument(
            name=self._single(children, Identifier, "named_argument"),
            expr=exprs[0] if exprs else None,
            position=self._get_node_position(node)
        )

    # --- Expressions ---

    def visit_expression(self, node, children) -> Expression:
        return self._single(children, Expression, "expression")

    def visit_conditional_expression(self, node, children):
        # conditional_expression rule: (prec_logical_or, '?', expression, ':', expression)
        exprs = self._nodes(children, Expression)
        if len(exprs) != 3:
            raise ValueError("conditional_expression should have 3 Expression children (condition, true, false)")
        return ConditionalOp(
            condition=exprs[0],
            true_expr=exprs[1],
            false_expr=exprs[2],
            position=self._get_node_position(node)
        )

    def _binary_chain(self, node, children):
        # OneOrMore(operand, sep=operator) alternates operand, operator, operand, ...
        # Build left-associative tree
        result = children[0]
        for i in range(1, len(children), 2):
            result = BinaryOp(
                op=children[i],
                left=result,
                right=children[i + 1],
                position=self._get_node_position(node)
            )
        return result

    visit_prec_logical_or = _binary_chain
    visit_prec_logical_and = _binary_chain
    visit_prec_binary_or = _binary_chain
    visit_prec_binary_xor = _binary_chain
    visit_prec_binary_and = _binary_chain
    visit_prec_equality = _binary_chain
    visit_prec_relational = _binary_chain
    visit_prec_shift = _binary_chain
    visit_prec_additive = _binary_chain
    visit_prec_multiplicative = _binary_chain
    visit_prec_power = _binary_chain

    def visit_prec_unary(self, node, children):
        # prec_unary rule: [inc_or_dec_expression, (unary_operator, prec_unary), primary]
        if len(children) == 1:
            return children[0]
        return UnaryOp(op=children[0], operand=children[1], position=self._get_node_position(node))

    def visit_primary(self, node, children):
        return self._single(children, Expression, "primary")

    def visit_paren_expr(self, node, children):
        return self._single(children, Expression, "paren_expr")

    def visit_concatenation(self, node, children):
        return Concatenation(items=self._nodes(children, Expression), position=self._get_node_position(node))
