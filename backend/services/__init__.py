"""Services for the persona chat proxy."""
from .chat_proxy import ProxyService
from .proxy_client import LocalProxyClient, HttpProxyClient
from .error_messages import user_facing_message
from .conversation_controller import ConversationController

__all__ = ['ProxyService', 'LocalProxyClient', 'HttpProxyClient', 'user_facing_message', 'ConversationController']
