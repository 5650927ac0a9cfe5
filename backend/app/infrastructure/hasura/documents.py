"""
GraphQL documents for the Hasura backend.

Chats are listed by last activity (newest first); messages by creation time
(oldest first) in both the list query and the live subscription.
"""

GET_CHATS = """
query GetChats {
  chats(order_by: { updated_at: desc }) {
    id
    title
    created_at
    updated_at
  }
}
"""

GET_CHAT_MESSAGES = """
query GetChatMessages($chatId: uuid!) {
  messages(
    where: { chat_id: { _eq: $chatId } }
    order_by: { created_at: asc }
  ) {
    id
    chat_id
    content
    is_bot
    created_at
    user_id
  }
}
"""

CREATE_CHAT = """
mutation CreateChat($title: String!) {
  insert_chats_one(object: { title: $title }) {
    id
    title
    created_at
    updated_at
  }
}
"""

UPDATE_CHAT = """
mutation UpdateChat($id: uuid!, $title: String) {
  update_chats_by_pk(pk_columns: { id: $id }, _set: { title: $title }) {
    id
    title
    created_at
    updated_at
  }
}
"""

DELETE_CHAT = """
mutation DeleteChat($id: uuid!) {
  delete_chats_by_pk(id: $id) {
    id
  }
}
"""

# User path: sent with the user's own bearer token
SEND_MESSAGE = """
mutation SendMessage($chatId: uuid!, $content: String!) {
  insert_messages_one(
    object: { chat_id: $chatId, content: $content, is_bot: false }
  ) {
    id
    chat_id
    content
    is_bot
    created_at
    user_id
  }
}
"""

# Service path: sent with the admin secret so bot rows bypass row permissions
INSERT_MESSAGE = """
mutation InsertMessage($chatId: uuid!, $content: String!, $isBot: Boolean!, $userId: uuid) {
  insert_messages_one(
    object: { chat_id: $chatId, content: $content, is_bot: $isBot, user_id: $userId }
  ) {
    id
    chat_id
    content
    is_bot
    created_at
    user_id
  }
}
"""

MESSAGES_SUBSCRIPTION = """
subscription MessagesSubscription($chatId: uuid!) {
  messages(
    where: { chat_id: { _eq: $chatId } }
    order_by: { created_at: asc }
  ) {
    id
    chat_id
    content
    is_bot
    created_at
    user_id
  }
}
"""

# Backend action handled by the relay webhook
SEND_CHATBOT_MESSAGE = """
mutation SendChatbotMessage($chatId: String!, $message: String!) {
  sendChatbotMessage(chatId: $chatId, message: $message)
}
"""
