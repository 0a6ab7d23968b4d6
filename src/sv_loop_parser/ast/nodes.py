from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .builder import Position


# --- AST nodes classes. ---

@dataclass(frozen=True)
class ASTNode(object):
    """Base class for all AST nodes.

    Nodes are immutable once built. Sequences of child nodes are stored as
    tuples, and identifiers and literals keep the matched source text.

    Attributes:
        position: The source position of this node in the original source.
    """
    position: "Position"

    def __str__(self) -> str:
        """Return a string representation of the AST node."""
        raise NotImplementedError


def _join(items) -> str:
    return ', '.join(str(item) for item in items)


# --- Identifiers ---

@dataclass(frozen=True)
class Identifier(ASTNode):
    """Represents a simple or escaped identifier.

    Examples:
        count
        \\bus+index

    Attributes:
        name: The identifier text as written in the source.
    """
    name: str

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Identifier('{self.name}')"


@dataclass(frozen=True)
class HierarchicalIdentifier(ASTNode):
    """A dotted path of identifiers, optionally anchored at `$root`.

    Examples:
        top.dut.mem
        $root.tb.arr

    Attributes:
        root: True when the path starts with `$root.`.
        path: The identifiers of the path, outermost first.
    """
    root: bool
    path: tuple[Identifier, ...]

    def __str__(self):
        prefix = "$root." if self.root else ""
        return prefix + '.'.join(str(part) for part in self.path)


@dataclass(frozen=True)
class PackageScope(ASTNode):
    """A package (or class) scope prefix such as `pkg::` or `$unit::`."""
    name: str

    def __str__(self):
        return f"{self.name}::"


@dataclass(frozen=True)
class ClassHandle(ASTNode):
    """An implicit class handle prefix: `this.`, `super.` or `this.super.`."""
    keyword: str

    def __str__(self):
        return f"{self.keyword}."


@dataclass(frozen=True)
class ScopedIdentifier(ASTNode):
    """A hierarchical identifier with an optional package scope or class handle.

    Used for the iterated array of a foreach loop and for task and function
    names.

    Examples:
        arr
        pkg::table
        this.entries

    Attributes:
        scope: The PackageScope or ClassHandle prefix, or None.
        name: The hierarchical identifier.
    """
    scope: PackageScope | ClassHandle | None
    name: HierarchicalIdentifier

    def __str__(self):
        return f"{self.scope or ''}{self.name}"


# --- Expressions ---

@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expressions."""
    pass


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """A numeric literal, kept as source text.

    Examples:
        10
        8'hFF
        3.5e-2
        '1

    Attributes:
        text: The literal exactly as matched.
    """
    text: str

    def __str__(self):
        return self.text


@dataclass(frozen=True)
class StringLiteral(Expression):
    """A string literal; `val` holds the text between the quotes, escapes untouched."""
    val: str

    def __str__(self):
        return f'"{self.val}"'


@dataclass(frozen=True)
class Select(ASTNode):
    """A bit select `[i]` or part select `[msb:lsb]`, `[base+:width]`, `[base-:width]`.

    Attributes:
        index: The bit index, msb or base expression.
        operator: ':', '+:' or '-:' for part selects, None for a bit select.
        width: The lsb or width expression of a part select, else None.
    """
    index: Expression
    operator: str | None = None
    width: Expression | None = None

    def __str__(self):
        if self.operator is None:
            return f"[{self.index}]"
        return f"[{self.index}{self.operator}{self.width}]"


@dataclass(frozen=True)
class VariableReference(Expression):
    """A reference to a variable, possibly scoped, with bit and part selects.

    Examples:
        i
        mem[addr]
        pkg::table[3][7:0]

    Attributes:
        name: The referenced ScopedIdentifier.
        selects: Selects applied to the variable, in source order.
    """
    name: ScopedIdentifier
    selects: tuple[Select, ...] = ()

    def __str__(self):
        return f"{self.name}{''.join(str(sel) for sel in self.selects)}"


@dataclass(frozen=True)
class Concatenation(Expression):
    """A concatenation `{a, b, c}`, used both as an expression and as an lvalue."""
    items: tuple[Expression, ...]

    def __str__(self):
        return f"{{{_join(self.items)}}}"


def _operand(expr: Expression) -> str:
    if isinstance(expr, (BinaryOp, ConditionalOp)):
        return f"({expr})"
    return str(expr)


@dataclass(frozen=True)
class UnaryOp(Expression):
    """A prefix unary operator such as `-x`, `!x` or the reduction `&bus`."""
    op: str
    operand: Expression

    def __str__(self):
        operand = _operand(self.operand)
        # Stacked operators need a gap: `- -x` would otherwise read as `--x`.
        if isinstance(self.operand, (UnaryOp, IncOrDecExpression)) and operand[:1] in "+-!~&|^":
            return f"{self.op} {operand}"
        return f"{self.op}{operand}"


@dataclass(frozen=True)
class BinaryOp(Expression):
    """A binary operator application.

    Chains of the same precedence level are built left-associative, so
    `a - b - c` is `BinaryOp('-', BinaryOp('-', a, b), c)`.

    Attributes:
        op: The operator text, e.g. '+', '<=', '==='.
        left: The left operand.
        right: The right operand.
    """
    op: str
    left: Expression
    right: Expression

    def __str__(self):
        return f"{_operand(self.left)} {self.op} {_operand(self.right)}"


@dataclass(frozen=True)
class ConditionalOp(Expression):
    """The conditional operator `condition ? true_expr : false_expr`."""
    condition: Expression
    true_expr: Expression
    false_expr: Expression

    def __str__(self):
        return f"{_operand(self.condition)} ? {self.true_expr} : {self.false_expr}"


@dataclass(frozen=True)
class IncOrDecExpression(Expression):
    """An increment or decrement of an lvalue.

    Examples:
        i++
        --count

    Attributes:
        lvalue: The variable being modified.
        operator: '++' or '--'.
        prefix: True for `++i`, False for `i++`.
    """
    lvalue: Expression
    operator: str
    prefix: bool

    def __str__(self):
        if self.prefix:
            return f"{self.operator}{self.lvalue}"
        return f"{self.lvalue}{self.operator}"


@dataclass(frozen=True)
class NamedArgument(ASTNode):
    """A named call argument `.name(expr)`; `expr` is None for `.name()`."""
    name: Identifier
    expr: Expression | None

    def __str__(self):
        return f".{self.name}({self.expr if self.expr is not None else ''})"


@dataclass(frozen=True)
class SubroutineCall(Expression):
    """Base class for task and function calls.

    `arguments` is None when the call is written without parentheses and
    an empty tuple for `f()`.
    """
    pass


@dataclass(frozen=True)
class TfCall(SubroutineCall):
    """A user task, function or method call.

    Examples:
        tick
        cfg.randomize()
        pkg::log(.msg("x"), 2)

    Attributes:
        name: The called ScopedIdentifier.
        arguments: Positional expressions and NamedArgument nodes, or None.
    """
    name: ScopedIdentifier
    arguments: tuple[Expression | NamedArgument, ...] | None = None

    def __str__(self):
        if self.arguments is None:
            return str(self.name)
        return f"{self.name}({_join(self.arguments)})"


@dataclass(frozen=True)
class SystemTfCall(SubroutineCall):
    """A system task or function call such as `$display("x")` or `$time`."""
    name: str
    arguments: tuple[Expression | NamedArgument, ...] | None = None

    def __str__(self):
        if self.arguments is None:
            return self.name
        return f"{self.name}({_join(self.arguments)})"


# --- Assignments ---

@dataclass(frozen=True)
class VariableAssignment(ASTNode):
    """A plain assignment `lvalue = expr`, as used in a for initializer."""
    lvalue: Expression
    expr: Expression

    def __str__(self):
        return f"{self.lvalue} = {self.expr}"


@dataclass(frozen=True)
class OperatorAssignment(ASTNode):
    """An assignment with any assignment operator.

    Examples:
        i = i + 1
        acc += x
        mask <<= 2

    Attributes:
        lvalue: The assigned variable.
        operator: The assignment operator text.
        expr: The assigned expression.
    """
    lvalue: Expression
    operator: str
    expr: Expression

    def __str__(self):
        return f"{self.lvalue} {self.operator} {self.expr}"


# --- Data types ---

@dataclass(frozen=True)
class PackedDimension(ASTNode):
    """A packed dimension `[msb:lsb]`, or `[]` when both bounds are None."""
    msb: Expression | None
    lsb: Expression | None

    def __str__(self):
        if self.msb is None:
            return "[]"
        return f"[{self.msb}:{self.lsb}]"


@dataclass(frozen=True)
class DataType(ASTNode):
    """Base class for data types."""
    pass


def _dims(dimensions) -> str:
    return ''.join(f" {dim}" for dim in dimensions)


@dataclass(frozen=True)
class IntegerVectorType(DataType):
    """`bit`, `logic` or `reg` with optional signing and packed dimensions."""
    keyword: str
    signing: str | None = None
    dimensions: tuple[PackedDimension, ...] = ()

    def __str__(self):
        signing = f" {self.signing}" if self.signing else ""
        return f"{self.keyword}{signing}{_dims(self.dimensions)}"


@dataclass(frozen=True)
class IntegerAtomType(DataType):
    """`byte`, `shortint`, `int`, `longint`, `integer` or `time` with optional signing."""
    keyword: str
    signing: str | None = None

    def __str__(self):
        signing = f" {self.signing}" if self.signing else ""
        return f"{self.keyword}{signing}"


@dataclass(frozen=True)
class BuiltinType(DataType):
    """A keyword type without modifiers: `real`, `shortreal`, `realtime`, `string`, `chandle`, `event`."""
    keyword: str

    def __str__(self):
        return self.keyword


@dataclass(frozen=True)
class NamedType(DataType):
    """A user-defined type name, optionally package scoped, with packed dimensions."""
    scope: PackageScope | None
    name: Identifier
    dimensions: tuple[PackedDimension, ...] = ()

    def __str__(self):
        return f"{self.scope or ''}{self.name}{_dims(self.dimensions)}"


# --- Statements ---

@dataclass(frozen=True)
class AttrSpec(ASTNode):
    """One `name [= expr]` entry of an attribute instance."""
    name: Identifier
    value: Expression | None = None

    def __str__(self):
        if self.value is None:
            return str(self.name)
        return f"{self.name} = {self.value}"


@dataclass(frozen=True)
class AttributeInstance(ASTNode):
    """An attribute instance `(* spec, spec *)`."""
    specs: tuple[AttrSpec, ...]

    def __str__(self):
        return f"(* {_join(self.specs)} *)"


@dataclass(frozen=True)
class StatementItem(ASTNode):
    """Base class for the item part of a statement."""
    pass


@dataclass(frozen=True)
class Statement(ASTNode):
    """A statement with its optional label and attribute instances.

    Example:
        retry: (* full_case *) x = 1;

    Attributes:
        label: The block label, or None.
        attributes: Attribute instances preceding the item.
        item: The StatementItem.
    """
    label: Identifier | None
    attributes: tuple[AttributeInstance, ...]
    item: StatementItem

    def __str__(self):
        parts = [f"{self.label}:"] if self.label is not None else []
        parts.extend(str(attr) for attr in self.attributes)
        parts.append(str(self.item))
        return ' '.join(parts)


@dataclass(frozen=True)
class NullStatement(ASTNode):
    """The empty statement: a bare `;`, optionally preceded by attribute instances."""
    attributes: tuple[AttributeInstance, ...] = ()

    def __str__(self):
        return ''.join(f"{attr} " for attr in self.attributes) + ";"


StatementOrNull = Union[Statement, NullStatement]


@dataclass(frozen=True)
class SeqBlock(StatementItem):
    """A sequential block `begin [: name] ... end [: name]`."""
    name: Identifier | None
    items: tuple[StatementOrNull, ...]
    end_name: Identifier | None = None

    def __str__(self):
        parts = [f"begin : {self.name}" if self.name is not None else "begin"]
        parts.extend(str(item) for item in self.items)
        parts.append(f"end : {self.end_name}" if self.end_name is not None else "end")
        return ' '.join(parts)


@dataclass(frozen=True)
class ConditionalStatement(StatementItem):
    """`if (condition) then_branch [else else_branch]`."""
    condition: Expression
    then_branch: StatementOrNull
    else_branch: StatementOrNull | None = None

    def __str__(self):
        text = f"if ({self.condition}) {self.then_branch}"
        if self.else_branch is not None:
            text += f" else {self.else_branch}"
        return text


@dataclass(frozen=True)
class JumpStatement(StatementItem):
    """`break;`, `continue;` or `return [expr];`."""
    keyword: str
    expr: Expression | None = None

    def __str__(self):
        if self.expr is None:
            return f"{self.keyword};"
        return f"{self.keyword} {self.expr};"


@dataclass(frozen=True)
class BlockingAssignment(StatementItem):
    """An operator assignment used as a statement: `x = 1;`, `acc += x;`."""
    assignment: OperatorAssignment

    def __str__(self):
        return f"{self.assignment};"


@dataclass(frozen=True)
class IncOrDecStatement(StatementItem):
    """An increment or decrement used as a statement: `i++;`."""
    expr: IncOrDecExpression

    def __str__(self):
        return f"{self.expr};"


@dataclass(frozen=True)
class SubroutineCallStatement(StatementItem):
    """A task or function call used as a statement: `tick;`, `$display(x);`."""
    call: SubroutineCall

    def __str__(self):
        return f"{self.call};"


# --- For-loop initialization and step ---

@dataclass(frozen=True)
class VarKeyword(ASTNode):
    """The explicit `var` marker of a for-loop variable declaration."""

    def __str__(self):
        return "var"


@dataclass(frozen=True)
class ForVariableBinding(ASTNode):
    """One `name = init` pair of a for-loop variable declaration."""
    name: Identifier
    init: Expression

    def __str__(self):
        return f"{self.name} = {self.init}"


@dataclass(frozen=True)
class ForVariableDeclaration(ASTNode):
    """A typed declaration in a for-loop initializer.

    Examples:
        int i = 0
        var logic [3:0] a = 0, b = 15

    Attributes:
        var: The VarKeyword marker, or None.
        data_type: The declared DataType.
        bindings: The declared names with their initializers, never empty.
    """
    var: VarKeyword | None
    data_type: DataType
    bindings: tuple[ForVariableBinding, ...]

    @property
    def nodes(self) -> tuple:
        return (self.var, self.data_type, self.bindings)

    def __str__(self):
        var = "var " if self.var is not None else ""
        return f"{var}{self.data_type} {_join(self.bindings)}"


@dataclass(frozen=True)
class ForInitialization(ASTNode):
    """Base class for the two forms of a for-loop initializer."""
    pass


@dataclass(frozen=True)
class ForInitAssignmentList(ForInitialization):
    """An initializer made of untyped assignments: `i = 0, j = n`."""
    assignments: tuple[VariableAssignment, ...]

    @property
    def nodes(self) -> tuple:
        return (self.assignments,)

    def __str__(self):
        return _join(self.assignments)


@dataclass(frozen=True)
class ForInitDeclarationList(ForInitialization):
    """An initializer made of typed declarations: `int i = 0, int j = n`."""
    declarations: tuple[ForVariableDeclaration, ...]

    @property
    def nodes(self) -> tuple:
        return (self.declarations,)

    def __str__(self):
        return _join(self.declarations)


@dataclass(frozen=True)
class ForStepAssignment(ASTNode):
    """Base class for one element of a for-loop step list."""
    pass


@dataclass(frozen=True)
class ForStepOperatorAssignment(ForStepAssignment):
    """A step element that is an operator assignment: `i += 2`."""
    assignment: OperatorAssignment

    @property
    def nodes(self) -> tuple:
        return (self.assignment,)

    def __str__(self):
        return str(self.assignment)


@dataclass(frozen=True)
class ForStepIncOrDec(ForStepAssignment):
    """A step element that is an increment or decrement: `i++`."""
    expr: IncOrDecExpression

    @property
    def nodes(self) -> tuple:
        return (self.expr,)

    def __str__(self):
        return str(self.expr)


@dataclass(frozen=True)
class ForStepSubroutineCall(ForStepAssignment):
    """A step element that is a task or function call: `advance()`."""
    call: SubroutineCall

    @property
    def nodes(self) -> tuple:
        return (self.call,)

    def __str__(self):
        return str(self.call)


@dataclass(frozen=True)
class LoopVariables(ASTNode):
    """The bracketed loop-variable list of a foreach loop.

    Each slot is an Identifier or None. None marks a dimension the loop
    iterates without binding a name, so slot positions always line up with
    the array's dimensions.

    Example:
        foreach (arr[i, , j])    // slots: (i, None, j)

    Attributes:
        slots: One entry per dimension, in order.
    """
    slots: tuple[Identifier | None, ...]

    @property
    def nodes(self) -> tuple:
        return (self.slots,)

    def __str__(self):
        return ', '.join('' if slot is None else str(slot) for slot in self.slots)


# --- Loop statements ---

@dataclass(frozen=True)
class LoopStatement(StatementItem):
    """Base class for the six loop statement forms.

    Every variant exposes `nodes`, its children in production order.
    """

    @property
    def nodes(self) -> tuple:
        raise NotImplementedError


@dataclass(frozen=True)
class LoopForever(LoopStatement):
    """`forever body`."""
    body: StatementOrNull

    @property
    def nodes(self) -> tuple:
        return (self.body,)

    def __str__(self):
        return f"forever {self.body}"


@dataclass(frozen=True)
class LoopRepeat(LoopStatement):
    """`repeat (count) body`; count is the iteration count expression."""
    count: Expression
    body: StatementOrNull

    @property
    def nodes(self) -> tuple:
        return (self.count, self.body)

    def __str__(self):
        return f"repeat ({self.count}) {self.body}"


@dataclass(frozen=True)
class LoopWhile(LoopStatement):
    """`while (condition) body`."""
    condition: Expression
    body: StatementOrNull

    @property
    def nodes(self) -> tuple:
        return (self.condition, self.body)

    def __str__(self):
        return f"while ({self.condition}) {self.body}"


@dataclass(frozen=True)
class LoopFor(LoopStatement):
    """The three-clause for loop.

    Examples:
        for (i = 0; i < 10; i = i + 1) foo;
        for (int i = 0, j = 7; i < j; i++, j--) swap(i, j);
        for (;;) ;

    Attributes:
        initialization: ForInitAssignmentList, ForInitDeclarationList or None.
        condition: The loop condition, or None.
        step: Non-empty tuple of ForStepAssignment nodes, or None.
        body: The loop body, a Statement or NullStatement.
    """
    initialization: ForInitialization | None
    condition: Expression | None
    step: tuple[ForStepAssignment, ...] | None
    body: StatementOrNull

    @property
    def nodes(self) -> tuple:
        return (self.initialization, self.condition, self.step, self.body)

    def __str__(self):
        init = str(self.initialization) if self.initialization is not None else ""
        condition = f" {self.condition}" if self.condition is not None else ""
        step = f" {_join(self.step)}" if self.step is not None else ""
        return f"for ({init};{condition};{step}) {self.body}"


@dataclass(frozen=True)
class LoopDoWhile(LoopStatement):
    """`do body while (condition);`."""
    body: StatementOrNull
    condition: Expression

    @property
    def nodes(self) -> tuple:
        return (self.body, self.condition)

    def __str__(self):
        return f"do {self.body} while ({self.condition});"


@dataclass(frozen=True)
class LoopForeach(LoopStatement):
    """`foreach (array[variables]) body`.

    The body is a Statement; a bare `;` is not accepted.

    Attributes:
        array: The iterated ScopedIdentifier.
        variables: The LoopVariables slots.
        body: The loop body.
    """
    array: ScopedIdentifier
    variables: LoopVariables
    body: Statement

    @property
    def nodes(self) -> tuple:
        return (self.array, self.variables, self.body)

    def __str__(self):
        return f"foreach ({self.array}[{self.variables}]) {self.body}"


# Closed variant sets
LOOP_STATEMENT_TYPES = (LoopForever, LoopRepeat, LoopWhile, LoopFor, LoopDoWhile, LoopForeach)
FOR_INITIALIZATION_TYPES = (ForInitAssignmentList, ForInitDeclarationList)
FOR_STEP_TYPES = (ForStepOperatorAssignment, ForStepIncOrDec, ForStepSubroutineCall)
