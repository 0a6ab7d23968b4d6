#######################################################################
# Arpeggio PEG Parser for SystemVerilog loop statements
#######################################################################

from arpeggio import ParserPython
from .grammar import loop_statement, loop_statement_unit, comment


# --- The parser ---

def getLoopStatementParser(require_eof=True, debug=False, memoization=True):
    """Create a loop statement parser instance.

    Args:
        require_eof: If True, the input must hold nothing but one loop statement.
            If False, parsing stops after the loop statement and the rest of the
            input is left unconsumed (default: True)
        debug: If True, enable Arpeggio debug output (default: False)
        memoization: If True, enable packrat memoization (default: True)

    Returns:
        ParserPython instance configured for loop statement parsing
    """
    root = loop_statement_unit if require_eof else loop_statement
    return ParserPython(
        root, comment, reduce_tree=False,
        memoization=memoization, autokwd=True, debug=debug
    )


# vim: set ts=4 sw=4 expandtab:
