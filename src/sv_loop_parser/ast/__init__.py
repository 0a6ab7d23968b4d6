import logging
import os

from arpeggio import NoMatch
from sv_loop_parser import getLoopStatementParser

# Import all AST nodes from nodes
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
    StatementOrNull,
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
    LOOP_STATEMENT_TYPES,
    FOR_INITIALIZATION_TYPES,
    FOR_STEP_TYPES,
)

# Import ASTBuilderVisitor and Position
from .builder import ASTBuilderVisitor, Position

# Import serialization functions
from .serialization import (
    ast_to_dict,
    ast_to_json,
    ast_from_dict,
    ast_from_json,
    ast_to_yaml,
    ast_from_yaml,
)


logger = logging.getLogger(__name__)


# --- AST convenience functions ---

def _log_syntax_error(parser, error: NoMatch, origin: str) -> None:
    line, column = parser.pos_to_linecol(error.position)
    logger.debug("Syntax error in %s at line %d, column %d: %s", origin, line, column, error)


def parse_ast(parser, code: str, origin: str = "<string>") -> LoopStatement | None:
    """Parse code and return the loop statement AST using ASTBuilderVisitor.

    Args:
        parser: An Arpeggio parser instance (from getLoopStatementParser())
        code: The SystemVerilog source to parse
        origin: Origin identifier for source location tracking (default: "<string>")

    Returns:
        The LoopStatement node, or None if the code does not match.
    """
    try:
        parse_tree = parser.parse(code)
    except NoMatch as e:
        _log_syntax_error(parser, e, origin)
        return None
    visitor = ASTBuilderVisitor(parser, origin=origin)
    return visitor.visit_parse_tree(parse_tree)


def parse_loop_statement(code: str, origin: str = "<string>") -> tuple[LoopStatement, str] | None:
    """
    Recognize one loop statement at the start of `code`.

    Leading whitespace and comments are skipped. Input after the loop
    statement is left unparsed and returned to the caller, so this can be
    driven by a larger parser that continues where the loop ended.

    Args:
        code (str): Source text starting with a loop statement.
        origin (str): Origin identifier for source location tracking (default: "<string>").

    Returns:
        tuple[LoopStatement, str] | None: The loop node and the unconsumed
            remainder of `code`, or None when no loop statement matches.

    Example:
        node, rest = parse_loop_statement("forever ; x = 1;")
        # node is LoopForever, rest == " x = 1;"
    """
    parser = getLoopStatementParser(require_eof=False)
    try:
        parse_tree = parser.parse(code)
    except NoMatch as e:
        _log_syntax_error(parser, e, origin)
        return None
    visitor = ASTBuilderVisitor(parser, origin=origin)
    node = visitor.visit_parse_tree(parse_tree)
    return node, code[parse_tree.position_end:]


def getASTfromString(code: str, origin: str = "<string>") -> LoopStatement | None:
    """
    Parse a SystemVerilog loop statement from a string and return its AST.

    The whole string, apart from surrounding whitespace and comments, must
    be a single loop statement.

    Args:
        code (str): The source code to be parsed.
        origin (str): Origin identifier for source location tracking (default: "<string>").

    Returns:
        LoopStatement | None: The loop node, or None if the code is not a loop statement.

    Example:
        ast = getASTfromString("for (int i = 0; i < 4; i++) $display(i);")
    """
    parser = getLoopStatementParser()
    return parse_ast(parser, code, origin=origin)


def getASTfromFile(file: str) -> LoopStatement | None:
    """
    Parse a file holding a single loop statement and return its AST.

    The absolute path of the file is used as the origin of every node position.

    Args:
        file (str): The source file to be parsed.

    Returns:
        LoopStatement | None: The loop node, or None if the file is not a loop statement.

    Raises:
        FileNotFoundError: If the specified file does not exist.
    """
    file_path = os.path.abspath(file)
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File {file} not found")

    with open(file_path, 'r', encoding='utf-8') as f:
        code = f.read()

    parser = getLoopStatementParser()
    return parse_ast(parser, code, origin=file_path)
