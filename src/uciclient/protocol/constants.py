class Command:
    UCI = "uci"
    ISREADY = "isready"
    SETOPTION = "setoption"   # setoption name <id> [value <x>]
    UCINEWGAME = "ucinewgame"
    POSITION = "position"     # position [fen <fenstring> | startpos] moves <move1> ...
    GO = "go"                 # go [depth <n>] [movetime <ms>] [nodes <n>] [infinite]
    STOP = "stop"
    QUIT = "quit"

class Response:
    ID = "id"                 # id name <x> | id author <x>
    OPTION = "option"         # option name <id> type <t> ...
    UCIOK = "uciok"
    READYOK = "readyok"
    INFO = "info"             # info depth 12 score cp 34 pv e2e4 ...
    BESTMOVE = "bestmove"     # bestmove <move> [ponder <move>]

class PositionToken:
    STARTPOS = "startpos"
    FEN = "fen"
    MOVES = "moves"

class GoParam:
    DEPTH = "depth"
    MOVETIME = "movetime"
    NODES = "nodes"
    INFINITE = "infinite"

# Sent as the best move when the side to move has no legal move
NULL_MOVES = ("0000", "(none)")
