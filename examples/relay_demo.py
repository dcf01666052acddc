"""Minimal demonstration of the Coze relay without the HTTP layer."""

import asyncio
import os

from coze_bridge import BridgeRequest, ConversationOrchestrator

if __name__ == "__main__":
    request = BridgeRequest(
        token=os.environ["COZE_TOKEN"],
        bot_id=os.environ["COZE_BOT_ID"],
        message="你好，请介绍一下自己。",
    )
    result = asyncio.run(ConversationOrchestrator().relay(request))
    print("User:", request.message)
    print("Bot:", result.reply if result.success else result.error)
    print("Conversation:", result.conversation_id)
