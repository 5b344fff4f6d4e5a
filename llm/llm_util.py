import time
from pathlib import Path
from typing import Optional

from langchain_core.prompts import PromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from util.logging_util import log_llm_interaction, setup_logger
from util.secrets import get_gemini_api_key, get_llm_model_name, get_llm_timeout

logger = setup_logger(__name__)


class LLMUnavailableError(RuntimeError):
    """Raised when no LLM backend is configured."""


def _response_text(content) -> str:
    # Gemini may answer with a list of content parts
    if isinstance(content, list):
        return "".join(part.get("text", "") for part in content if isinstance(part, dict))
    return content


def get_llm_response(template_path: str, params: dict, model_name: Optional[str] = None,
                     timeout: Optional[float] = None) -> str:
    """
    Render a Jinja2 prompt file with `params` and return the model's text answer.

    Args:
        template_path: Path to the Jinja2 prompt template.
        params: Values for the template variables.
        model_name: Gemini model to use. Defaults to the LLM_MODEL setting.
        timeout: Request timeout in seconds. Defaults to the LLM_TIMEOUT_SECONDS setting.

    Raises:
        LLMUnavailableError: if GEMINI_API_KEY is not set.
    """
    api_key = get_gemini_api_key()
    if api_key is None:
        raise LLMUnavailableError("GEMINI_API_KEY is not set")

    model_name = model_name or get_llm_model_name()
    start_time = time.time()

    # No retries: the classifier falls back instead
    llm = ChatGoogleGenerativeAI(
        model=model_name,
        google_api_key=api_key,
        timeout=timeout if timeout is not None else get_llm_timeout(),
        max_retries=0,
    )
    prompt = PromptTemplate.from_template(Path(template_path).read_text(), template_format="jinja2")
    chain = prompt | llm

    response_text = _response_text(chain.invoke(params).content)

    duration_ms = (time.time() - start_time) * 1000
    log_llm_interaction(logger, template_path, params, response_text, model_name, duration_ms)
    return response_text
