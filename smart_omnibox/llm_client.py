"""Chat completion backend (DeepSeek, OpenAI-compatible API)"""

from typing import Any, Dict, List, Optional

import openai
import structlog

from .config import settings
from .exceptions import ChatBackendError

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = (
    "你是谨慎可靠的助手。要求：1) 内容准确、必要时给出可执行建议；"
    "2) 无法确认时明确说明不确定并给出安全做法；"
    "3) 输出为【纯文本】，不要使用任何 Markdown 或装饰字符；禁止出现 *, **, #, _, `, >, 以及表情符号；"
    "4) 列表仅使用阿拉伯数字编号（1. 2. 3.）和短横线子项（- ），不要加粗/斜体/代码块；"
    "5) 保持中文标点与换行整洁。"
)

ATTACHMENT_PREFIX = "以下是与用户问题相关的文件内容，请结合回答：\n"


class DeepSeekClient:
    """Thin async wrapper around the chat completions endpoint"""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[openai.AsyncOpenAI] = None
    ):
        self.api_key = api_key if api_key is not None else settings.deepseek_api_key
        self.model = model or settings.deepseek_model
        self.base_url = base_url or settings.deepseek_base_url
        self._client = client
    
    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise ChatBackendError("Missing DEEPSEEK_API_KEY")
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=settings.chat_timeout_seconds
            )
        return self._client
    
    async def ask(self, prompt: str) -> Dict[str, str]:
        """Single question, answered in plain text"""
        return await self.complete([
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ])
    
    async def chat(self, messages: List[Dict[str, str]], attachments: Optional[List[str]] = None) -> Dict[str, str]:
        """Multi-turn chat, attachment text prepended as a system message"""
        attach_text = "\n\n".join(a for a in (attachments or []) if a)
        if attach_text:
            messages = [{"role": "system", "content": ATTACHMENT_PREFIX + attach_text}] + list(messages)
        return await self.complete(messages)
    
    async def complete(self, messages: List[Dict[str, Any]]) -> Dict[str, str]:
        """Run a completion and return {text, model}"""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=settings.chat_temperature,
                max_tokens=settings.chat_max_tokens,
                stream=False
            )
        except openai.APIStatusError as e:
            logger.error("Chat completion rejected", status=e.status_code, error=str(e))
            raise ChatBackendError(f"DeepSeek API {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            logger.error("Chat completion failed", error=str(e))
            raise ChatBackendError(str(e)) from e
        
        text = ""
        if response.choices and response.choices[0].message.content:
            text = response.choices[0].message.content.strip()
        return {"text": text, "model": response.model or self.model}
