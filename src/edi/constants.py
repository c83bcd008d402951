from __future__ import annotations

EDI_VERSION = "0.1.0"
EDI_TAB_STOP = 8
EDI_QUERY_LEN = 256
EDI_QUIT_TIMES = 3
EDI_MESSAGE_TIMEOUT = 5

# Syntax highlight types.
HL_NORMAL = 0
HL_COMMENT = 1
HL_STRING = 2
HL_NUMBER = 3
HL_MATCH = 4

HL_HIGHLIGHT_STRINGS = 1 << 0
HL_HIGHLIGHT_NUMBERS = 1 << 1

SEPARATORS = ",.()+-/*=~%<>[];"

# Key actions.
CTRL_A = 1
CTRL_C = 3
CTRL_E = 5
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

C_HL_EXTENSIONS = (".c", ".h", ".cpp", ".hpp", ".cc")
PY_HL_EXTENSIONS = (".py",)
