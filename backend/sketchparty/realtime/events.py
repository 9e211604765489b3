"""Socket.IO event names exchanged with the browser client."""

# client -> server
CREATE_ROOM = "createRoom"
JOIN_ROOM = "joinRoom"
START_GAME = "startGame"
ADD_AI_PLAYER = "addAIPlayer"
WORD_CHOSEN = "wordChosen"
GUESS_WORD = "guessWord"
DRAW_EVENT = "drawEvent"
CLEAR_CANVAS = "clearCanvas"

# server -> client
ROOM_CREATED = "roomCreated"
ROOM_JOINED = "roomJoined"
ROOM_ERROR = "roomError"
PLAYER_LIST_UPDATE = "playerListUpdate"
GAME_STARTED = "gameStarted"
ROUND_PREPARING = "roundPreparing"
CHOOSE_WORD = "chooseWord"
ROUND_INFO = "roundInfo"
YOUR_WORD = "yourWord"
TIMER_UPDATE = "timerUpdate"
HINT_UPDATE = "hintUpdate"
ROUND_ENDED = "roundEnded"
GAME_OVER = "gameOver"
SCORES_UPDATE = "scoresUpdate"
CHAT_MESSAGE = "chatMessage"
REMOTE_DRAW_EVENT = "remoteDrawEvent"
CLEAR_CANVAS_ALL = "clearCanvasAll"

SYSTEM_NAME = "System"
