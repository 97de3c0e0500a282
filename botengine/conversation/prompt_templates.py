"""
botengine/conversation/prompt_templates.py — LangChain prompt for the chat pass-through.

One prompt: the persona system message, the stored session history and the
latest user message.
"""

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder


PERSONA_CHAT_PROMPT = ChatPromptTemplate.from_messages([
    (
        "system",
        (
            "You are {persona_name}, a specialist at an Indian interior design firm. "
            "Your expertise: {persona_expertise}. "
            "Answer the customer's questions about their project briefly and warmly. "
            "Quote prices in Indian Rupees only when the customer already has an estimate; "
            "otherwise suggest completing the project questionnaire for a quote."
        ),
    ),
    MessagesPlaceholder("history"),
    ("human", "{message}"),
])
