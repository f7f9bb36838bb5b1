"""
routes/chat.py — Chat proxy Blueprint

Registers routes:
  POST /api/chat    body {"prompt": str} → {"reply": str}

The prompt is embedded in the instruction template from config
(chat.prompt_template) and sent to the default LLM provider. The token for
the hosted model stays on the server; clients only ever see the cleaned
reply. A per-IP limit (chat.rate_limit) is applied in app.create_app().
"""

import logging

from flask import Blueprint, jsonify, request

import providers.llm  # noqa: F401  registers the huggingface provider
from config.loader import config
from providers.registry import get_llm_provider
from services.reply_cleaner import clean_reply

logger = logging.getLogger(__name__)

chat_bp = Blueprint('chat', __name__)

INVALID_PROMPT = 'Invalid prompt - must be a non-empty string'

_DEFAULT_TEMPLATE = (
    "You are an accurate, knowledgeable AI assistant. Provide only factual "
    "information. If unsure, say you don't know. Question: {prompt}"
)


def build_prompt(prompt: str) -> str:
    """Embed the user's question in the fixed instruction template."""
    template = config.get('chat.prompt_template') or _DEFAULT_TEMPLATE
    return template.replace('{prompt}', prompt)


@chat_bp.route('/api/chat', methods=['POST'])
def chat():
    data = request.get_json(silent=True)
    prompt = data.get('prompt') if isinstance(data, dict) else None
    if not isinstance(prompt, str) or not prompt.strip():
        return jsonify({'error': INVALID_PROMPT}), 400

    try:
        llm = get_llm_provider()
        result = llm.generate(build_prompt(prompt))
    except Exception as e:
        logger.error(f'Chat generation failed: {e}')
        body = {'error': 'Internal server error'}
        if config.is_development():
            body['details'] = str(e)
        return jsonify(body), 500

    reply = clean_reply(result.content)
    logger.info(f'Chat reply via {result.provider}/{result.model} in {result.latency_ms:.0f}ms')
    return jsonify({'reply': reply})
