from __future__ import annotations

QUILL_VERSION = "0.2.0"
QUILL_TAB_STOP = 8
QUILL_QUERY_LEN = 256
QUILL_QUIT_TIMES = 3
MESSAGE_TIMEOUT = 5

# Syntax highlight types.
HL_NORMAL = 0
HL_COMMENT = 2
HL_MLCOMMENT = 3
HL_KEYWORD1 = 4
HL_KEYWORD2 = 5
HL_STRING = 6
HL_NUMBER = 7
HL_MATCH = 8

HL_HIGHLIGHT_NUMBERS = 1 << 0
HL_HIGHLIGHT_STRINGS = 1 << 1

SEPARATORS = ",.()+-/*=~%<>[];"

# Search prompt triggers.
FIND_KEYSTROKE = 0
FIND_CONFIRM = 1
FIND_CANCEL = 2
FIND_NEXT = 3
FIND_PREVIOUS = 4

# Key actions.
CTRL_F = 6
CTRL_H = 8
TAB = 9
CTRL_L = 12
ENTER = 13
CTRL_Q = 17
CTRL_S = 19
ESC = 27
BACKSPACE = 127

ARROW_LEFT = 1000
ARROW_RIGHT = 1001
ARROW_UP = 1002
ARROW_DOWN = 1003
DEL_KEY = 1004
HOME_KEY = 1005
END_KEY = 1006
PAGE_UP = 1007
PAGE_DOWN = 1008

ANSI_HIDE_CURSOR = "\x1b[?25l"
ANSI_SHOW_CURSOR = "\x1b[?25h"
ANSI_CURSOR_HOME = "\x1b[H"
ANSI_CLEAR_SCREEN = "\x1b[2J"
ANSI_CLEAR_LINE = "\x1b[K"
ANSI_INVERT_ON = "\x1b[7m"
ANSI_INVERT_OFF = "\x1b[m"
ANSI_DEFAULT_FG = "\x1b[39m"

C_HL_EXTENSIONS = (".c", ".h", ".cpp", ".hpp", ".cc")
C_HL_KEYWORDS = (
    # C keywords.
    "auto",
    "break",
    "case",
    "continue",
    "default",
    "do",
    "else",
    "enum",
    "extern",
    "for",
    "goto",
    "if",
    "register",
    "return",
    "sizeof",
    "static",
    "struct",
    "switch",
    "typedef",
    "union",
    "volatile",
    "while",
    "NULL",
    # C++ keywords.
    "class",
    "constexpr",
    "delete",
    "explicit",
    "false",
    "friend",
    "inline",
    "namespace",
    "new",
    "nullptr",
    "operator",
    "private",
    "protected",
    "public",
    "template",
    "this",
    "throw",
    "true",
    "try",
    "virtual",
    # C types (secondary class).
    "int|",
    "long|",
    "double|",
    "float|",
    "char|",
    "unsigned|",
    "signed|",
    "void|",
    "short|",
    "const|",
    "bool|",
)

PY_HL_EXTENSIONS = (".py", ".pyw")
PY_HL_KEYWORDS = (
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
    # Builtin constants and types (secondary class).
    "None|",
    "True|",
    "False|",
    "int|",
    "str|",
    "bytes|",
    "float|",
    "bool|",
    "list|",
    "dict|",
    "tuple|",
    "set|",
    "self|",
)
