"""Socket.IO event names shared with the web client."""

# Server -> client
USER_STATUS_CHANGE = "user-status-change"
NEW_NOTIFICATION = "new-notification"
NEW_POST = "new-post"
POST_DELETED = "post-deleted"
POST_LIKED = "post-liked"
NEW_COMMENT = "new-comment"
COMMENT_DELETED = "comment-deleted"
EVENT_DELETED = "event-deleted"
SERMON_DELETED = "sermon-deleted"
NEW_MESSAGE = "new-message"
USER_TYPING = "user-typing"
USER_STOP_TYPING = "user-stop-typing"
MESSAGE_READ_RECEIPT = "message-read-receipt"

# Client -> server
USER_ONLINE = "user-online"
JOIN_CONVERSATION = "join-conversation"
LEAVE_CONVERSATION = "leave-conversation"
TYPING_START = "typing-start"
TYPING_STOP = "typing-stop"
MESSAGE_READ = "message-read"
SEND_NOTIFICATION = "send-notification"
