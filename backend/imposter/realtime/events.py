# Client -> server
CREATE_GAME = "createGame"
JOIN_GAME = "joinGame"
START_GAME = "startGame"
END_GAME = "endGame"
NEW_GAME_SAME_ROOM = "newGameSameRoom"

# Server -> client
GAME_CREATED = "gameCreated"
JOINED_GAME = "joinedGame"
JOIN_ERROR = "joinError"
GAME_ERROR = "gameError"
PLAYER_LIST_UPDATED = "playerListUpdated"
ROLE_ASSIGNED = "roleAssigned"
GAME_STARTED = "gameStarted"
GAME_FINISHED = "gameFinished"
ROOM_RESET = "roomReset"
ROOM_CLOSED = "roomClosed"

HOST_LEFT_MESSAGE = "The host left, the room has been closed."
IDLE_CLOSED_MESSAGE = "The room was closed after a period of inactivity."
