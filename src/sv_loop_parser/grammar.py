#######################################################################
# Arpeggio PEG Grammar for SystemVerilog loop statements
#######################################################################

from arpeggio import (
    Optional, ZeroOrMore, OneOrMore, EOF, Kwd, Not,
    RegExMatch as _
)


RESERVED_WORDS = (
    'always', 'assign', 'automatic', 'begin', 'bit', 'break', 'byte',
    'case', 'chandle', 'class', 'const', 'continue', 'do', 'else', 'end',
    'endcase', 'endclass', 'endfunction', 'endmodule', 'endpackage',
    'endtask', 'enum', 'event', 'for', 'force', 'foreach', 'forever',
    'fork', 'function', 'if', 'initial', 'int', 'integer', 'join',
    'logic', 'longint', 'module', 'null', 'package', 'packed', 'priority',
    'real', 'realtime', 'reg', 'release', 'repeat', 'return', 'shortint',
    'shortreal', 'signed', 'static', 'string', 'struct', 'super', 'task',
    'this', 'time', 'typedef', 'union', 'unique', 'unique0', 'unsigned',
    'var', 'void', 'wait', 'while', 'wire',
)

_WORD_END = r'(?![A-Za-z0-9_$])'


# --- Parsing roots ---

def loop_statement_unit():
    return (loop_statement, EOF)


# --- Lexical and basic rules ---

def comment_line():
    return _(r'//.*?$', str_repr='comment')


def comment_multi():
    return _(r'(?ms)/\*.*?\*/', str_repr='comment')


def comment():
    return [comment_line, comment_multi]


def reserved_word():
    return _(r'(%s)%s' % ('|'.join(RESERVED_WORDS), _WORD_END))


# --- Tokens ---

def TOK_ID():
    return _(r'[A-Za-z_][A-Za-z0-9_$]*', str_repr='identifier')


def TOK_ESCAPED_ID():
    return _(r'\\[!-~]+', str_repr='identifier')


def TOK_SYSTEM_ID():
    # $unit and $root are scope prefixes, not system task names
    return _(r'\$(?!(unit|root)%s)[A-Za-z0-9_$]+' % _WORD_END)


def TOK_NUMBER():
    return _(
        r"(\d[\d_]*)?\s*'[sS]?[bBoOdDhH]\s*[0-9a-fA-FxXzZ?][0-9a-fA-FxXzZ?_]*"
        r"|\d[\d_]*(\.\d[\d_]*)?[eE][+-]?\d[\d_]*"
        r"|\d[\d_]*\.\d[\d_]*"
        r"|\d[\d_]*"
        r"|'[01xXzZ]"
        )


def TOK_STRING():
    return _(r'"([^"\\\n]|\\.)*"', str_repr='string')


def TOK_COMMA():
    return ','


def TOK_SEMICOLON():
    return ';'


def TOK_COLON():
    return _(r':(?!:)')


def TOK_SCOPE():
    return '::'


def TOK_PERIOD():
    return '.'


def TOK_QUESTION():
    return '?'


def TOK_PAREN():
    return '('


def TOK_ENDPAREN():
    return ')'


def TOK_BRACKET():
    return '['


def TOK_ENDBRACKET():
    return ']'


def TOK_BRACE():
    return '{'


def TOK_ENDBRACE():
    return '}'


def TOK_ATTR_START():
    return _(r'\(\*(?!\))')


def TOK_ATTR_END():
    return '*)'


def TOK_ASSIGN():
    return ('=', Not('='))


def TOK_ASSIGNMENT_OP():
    return _(r'<<<=|>>>=|<<=|>>=|\+=|-=|\*=|/=|%=|&=|\|=|\^=|=(?!=)')


def TOK_INC_OR_DEC():
    return _(r'\+\+|--')


def TOK_PART_SELECT():
    return _(r'\+:|-:|:(?!:)')


def TOK_LOGICAL_OR():
    return "||"


def TOK_LOGICAL_AND():
    return "&&"


def TOK_BINARY_OR():
    return _(r'\|(?![|=])')


def TOK_BINARY_XOR():
    return _(r'\^~|~\^|\^(?!=)')


def TOK_BINARY_AND():
    return _(r'&(?![&=])')


def TOK_EQUALITY_OP():
    return _(r'===|!==|==\?|!=\?|==|!=')


def TOK_RELATIONAL_OP():
    return _(r'<=|>=|<(?![<=])|>(?![>=])')


def TOK_SHIFT_OP():
    return _(r'(<<<|>>>|<<(?!<)|>>(?!>))(?!=)')


def TOK_ADDITIVE_OP():
    return _(r'\+(?![+=:])|-(?![-=:>])')


def TOK_MULTIPLICATIVE_OP():
    return _(r'\*(?![*=)])|/(?!=)|%(?!=)')


def TOK_POWER():
    return '**'


def TOK_UNARY_OP():
    return _(r'~&|~\||~\^|\^~|!(?!=)|~|&(?!&)|\|(?!\|)|\^|\+(?!\+)|-(?!-)')


# --- Keywords ---

def KWD_FOREVER():
    return Kwd('forever')


def KWD_REPEAT():
    return Kwd('repeat')


def KWD_WHILE():
    return Kwd('while')


def KWD_FOR():
    return Kwd('for')


def KWD_DO():
    return Kwd('do')


def KWD_FOREACH():
    return Kwd('foreach')


def KWD_VAR():
    return Kwd('var')


def KWD_IF():
    return Kwd('if')


def KWD_ELSE():
    return Kwd('else')


def KWD_BEGIN():
    return Kwd('begin')


def KWD_END():
    return Kwd('end')


def KWD_BREAK():
    return Kwd('break')


def KWD_CONTINUE():
    return Kwd('continue')


def KWD_RETURN():
    return Kwd('return')


def KWD_THIS():
    return Kwd('this')


def KWD_SUPER():
    return Kwd('super')


def KWD_UNIT():
    return _(r'\$unit%s' % _WORD_END)


def KWD_ROOT():
    return _(r'\$root%s' % _WORD_END)


def KWD_SIGNING():
    return _(r'(signed|unsigned)%s' % _WORD_END)


def KWD_INTEGER_VECTOR_TYPE():
    return _(r'(bit|logic|reg)%s' % _WORD_END)


def KWD_INTEGER_ATOM_TYPE():
    return _(r'(byte|shortint|int|longint|integer|time)%s' % _WORD_END)


def KWD_NON_INTEGER_TYPE():
    return _(r'(shortreal|realtime|real)%s' % _WORD_END)


def KWD_SIMPLE_TYPE():
    return _(r'(string|chandle|event)%s' % _WORD_END)


# --- Identifiers ---

def identifier():
    return (Not(reserved_word), [TOK_ID, TOK_ESCAPED_ID])


def variable_identifier():
    return (identifier,)  # Tuple to prevent eliding the identifier


def index_variable_identifier():
    return (identifier,)  # Tuple to prevent eliding the identifier


def hierarchical_identifier():
    return (Optional(KWD_ROOT, TOK_PERIOD), OneOrMore(identifier, sep=TOK_PERIOD))


def package_scope():
    return ([KWD_UNIT, identifier], TOK_SCOPE)


def implicit_class_handle():
    return [
            (KWD_THIS, TOK_PERIOD, KWD_SUPER),
            KWD_THIS,
            KWD_SUPER
        ]


def class_qualifier():
    return [
            (implicit_class_handle, TOK_PERIOD),
            package_scope
        ]


def ps_or_hierarchical_array_identifier():
    return (Optional(class_qualifier), hierarchical_identifier)


def ps_or_hierarchical_tf_identifier():
    return (Optional(class_qualifier), hierarchical_identifier)


# --- Loop statements ---

def loop_statement():
    return [
            loop_statement_forever,
            loop_statement_repeat,
            loop_statement_while,
            loop_statement_for,
            loop_statement_do_while,
            loop_statement_foreach
        ]


def loop_statement_forever():
    return (KWD_FOREVER, statement_or_null)


def loop_statement_repeat():
    return (KWD_REPEAT, TOK_PAREN, expression, TOK_ENDPAREN, statement_or_null)


def loop_statement_while():
    return (KWD_WHILE, TOK_PAREN, expression, TOK_ENDPAREN, statement_or_null)


def loop_statement_for():
    return (
        KWD_FOR,
        TOK_PAREN,
        Optional(for_initialization),
        TOK_SEMICOLON,
        Optional(expression),
        TOK_SEMICOLON,
        Optional(for_step),
        TOK_ENDPAREN,
        statement_or_null
    )


def loop_statement_do_while():
    return (
        KWD_DO,
        statement_or_null,
        KWD_WHILE,
        TOK_PAREN,
        expression,
        TOK_ENDPAREN,
        TOK_SEMICOLON
    )


def loop_statement_foreach():
    return (
        KWD_FOREACH,
        TOK_PAREN,
        ps_or_hierarchical_array_identifier,
        loop_variables,
        TOK_ENDPAREN,
        statement
    )


def for_initialization():
    # Assignment list first; on failure the parser rewinds and tries declarations.
    return [
            for_init_assignments,
            for_init_declarations
        ]


def for_init_assignments():
    return (list_of_variable_assignments,)


def for_init_declarations():
    return OneOrMore(for_variable_declaration, sep=TOK_COMMA)


def for_variable_declaration():
    return (Optional(KWD_VAR), data_type, OneOrMore(for_variable_binding, sep=TOK_COMMA))


def for_variable_binding():
    return (variable_identifier, TOK_ASSIGN, expression)


def for_step():
    return OneOrMore(for_step_assignment, sep=TOK_COMMA)


def for_step_assignment():
    return [
            operator_assignment,
            inc_or_dec_expression,
            function_subroutine_call
        ]


def loop_variables():
    # Brackets belong to the rule so an all-empty list still yields a node.
    return (
        TOK_BRACKET,
        Optional(index_variable_identifier),
        ZeroOrMore(TOK_COMMA, Optional(index_variable_identifier)),
        TOK_ENDBRACKET
    )


# --- Statements ---

def statement_or_null():
    return [
            statement,
            null_statement
        ]


def null_statement():
    return (ZeroOrMore(attribute_instance), TOK_SEMICOLON)


def statement():
    return (Optional(statement_label), ZeroOrMore(attribute_instance), statement_item)


def statement_label():
    return (identifier, TOK_COLON)


def statement_item():
    return [
            seq_block,
            conditional_statement,
            loop_statement,
            jump_statement,
            blocking_assignment_statement,
            inc_or_dec_statement,
            subroutine_call_statement
        ]


def seq_block():
    return (
        KWD_BEGIN,
        Optional(TOK_COLON, identifier),
        ZeroOrMore(statement_or_null),
        KWD_END,
        Optional(TOK_COLON, identifier)
    )


def conditional_statement():
    return (
        KWD_IF,
        TOK_PAREN,
        expression,
        TOK_ENDPAREN,
        statement_or_null,
        Optional(KWD_ELSE, statement_or_null)
    )


def jump_statement():
    return [
            (KWD_RETURN, Optional(expression), TOK_SEMICOLON),
            (KWD_BREAK, TOK_SEMICOLON),
            (KWD_CONTINUE, TOK_SEMICOLON)
        ]


def blocking_assignment_statement():
    return (operator_assignment, TOK_SEMICOLON)


def inc_or_dec_statement():
    return (inc_or_dec_expression, TOK_SEMICOLON)


def subroutine_call_statement():
    return (function_subroutine_call, TOK_SEMICOLON)


def attribute_instance():
    return (TOK_ATTR_START, OneOrMore(attr_spec, sep=TOK_COMMA), TOK_ATTR_END)


def attr_spec():
    return (identifier, Optional(TOK_ASSIGN, expression))


# --- Data types ---

def data_type():
    return [
            integer_vector_type,
            integer_atom_type,
            non_integer_type,
            simple_type,
            named_type
        ]


def integer_vector_type():
    return (KWD_INTEGER_VECTOR_TYPE, Optional(KWD_SIGNING), ZeroOrMore(packed_dimension))


def integer_atom_type():
    return (KWD_INTEGER_ATOM_TYPE, Optional(KWD_SIGNING))


def non_integer_type():
    return (KWD_NON_INTEGER_TYPE,)


def simple_type():
    return (KWD_SIMPLE_TYPE,)


def named_type():
    return (Optional(package_scope), identifier, ZeroOrMore(packed_dimension))


def packed_dimension():
    return [
            (TOK_BRACKET, expression, TOK_COLON, expression, TOK_ENDBRACKET),
            (TOK_BRACKET, TOK_ENDBRACKET)
        ]


# --- Assignments ---

def list_of_variable_assignments():
    return OneOrMore(variable_assignment, sep=TOK_COMMA)


def variable_assignment():
    return (variable_lvalue, TOK_ASSIGN, expression)


def operator_assignment():
    return (variable_lvalue, TOK_ASSIGNMENT_OP, expression)


def inc_or_dec_expression():
    return [
            (TOK_INC_OR_DEC, variable_lvalue),
            (variable_lvalue, TOK_INC_OR_DEC)
        ]


def variable_lvalue():
    return [
            lvalue_concatenation,
            variable_reference
        ]


def lvalue_concatenation():
    return (TOK_BRACE, OneOrMore(variable_lvalue, sep=TOK_COMMA), TOK_ENDBRACE)


def variable_reference():
    return (Optional(class_qualifier), hierarchical_identifier, ZeroOrMore(select))


def select():
    return (TOK_BRACKET, expression, Optional(TOK_PART_SELECT, expression), TOK_ENDBRACKET)


# --- Subroutine calls ---

def function_subroutine_call():
    return [
            system_tf_call,
            tf_call
        ]


def system_tf_call():
    return (TOK_SYSTEM_ID, Optional(TOK_PAREN, Optional(list_of_arguments), TOK_ENDPAREN))


def tf_call():
    return (ps_or_hierarchical_tf_identifier, Optional(TOK_PAREN, Optional(list_of_arguments), TOK_ENDPAREN))


def tf_call_with_arguments():
    return (ps_or_hierarchical_tf_identifier, TOK_PAREN, Optional(list_of_arguments), TOK_ENDPAREN)


def list_of_arguments():
    return OneOrMore(argument, sep=TOK_COMMA)


def argument():
    return [
            named_argument,
            expression
        ]


def named_argument():
    return (TOK_PERIOD, identifier, TOK_PAREN, Optional(expression), TOK_ENDPAREN)


# --- Expressions ---

def expression():
    return [
            conditional_expression,
            prec_logical_or
        ]


def conditional_expression():
    return (prec_logical_or, TOK_QUESTION, expression, TOK_COLON, expression)


def prec_logical_or():
    return OneOrMore(prec_logical_and, sep=TOK_LOGICAL_OR)


def prec_logical_and():
    return OneOrMore(prec_binary_or, sep=TOK_LOGICAL_AND)


def prec_binary_or():
    return OneOrMore(prec_binary_xor, sep=TOK_BINARY_OR)


def prec_binary_xor():
    return OneOrMore(prec_binary_and, sep=TOK_BINARY_XOR)


def prec_binary_and():
    return OneOrMore(prec_equality, sep=TOK_BINARY_AND)


def prec_equality():
    return OneOrMore(prec_relational, sep=TOK_EQUALITY_OP)


def prec_relational():
    return OneOrMore(prec_shift, sep=TOK_RELATIONAL_OP)


def prec_shift():
    return OneOrMore(prec_additive, sep=TOK_SHIFT_OP)


def prec_additive():
    return OneOrMore(prec_multiplicative, sep=TOK_ADDITIVE_OP)


def prec_multiplicative():
    return OneOrMore(prec_power, sep=TOK_MULTIPLICATIVE_OP)


def prec_power():
    return OneOrMore(prec_unary, sep=TOK_POWER)


def prec_unary():
    return [
            inc_or_dec_expression,
            (TOK_UNARY_OP, prec_unary),
            primary
        ]


def primary():
    return [
            TOK_NUMBER,
            TOK_STRING,
            paren_expr,
            concatenation,
            system_tf_call,
            tf_call_with_arguments,
            variable_reference
        ]


def paren_expr():
    return (TOK_PAREN, expression, TOK_ENDPAREN)


def concatenation():
    return (TOK_BRACE, OneOrMore(expression, sep=TOK_COMMA), TOK_ENDBRACE)


# vim: set ts=4 sw=4 expandtab:
