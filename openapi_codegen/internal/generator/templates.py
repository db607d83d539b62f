from string import Template

from ...config import GeneratorOptions


class Templates:
    """Шаблоны для генерации файлов"""

    common = Template('''import asyncio
import base64
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode
from uuid import UUID

from aiohttp import ClientError, ClientSession, ClientTimeout
from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class ApiRequestError(Exception):
    """Ответ сервера со статусом вне диапазона 2xx"""

    def __init__(self, status_code: int, response_text: str):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(f"Request failed with status {status_code}: {response_text}")


class DeserializationError(Exception):
    """Тело ответа не удалось превратить в ожидаемый тип"""


class ApiResponse:
    """Прочитанный ответ сервера"""

    def __init__(self, status_code: int, headers: Any, text: str):
        self.status_code = status_code
        self.headers = headers
        self.text = text

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def serialize_value(value: Any) -> Any:
    """Сериализация значения для JSON тела запроса"""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    elif isinstance(value, (Decimal, UUID)):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, bytes):
        return base64.b64encode(value).decode("utf-8")
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    elif hasattr(value, "model_dump"):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        return value


def serialize_query_value(value: Any) -> Any:
    """Сериализация значения query параметра"""
    if isinstance(value, bool):
        return str(value).lower()
    elif isinstance(value, (datetime, date, time)):
        return value.isoformat()
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, (list, tuple)):
        return [serialize_query_value(item) for item in value]
    else:
        return str(value)


def build_query(pairs: List[Tuple[str, Any]]) -> str:
    """Query строка name=value&... из непустых параметров"""
    return urlencode(
        [(name, serialize_query_value(value)) for name, value in pairs], doseq=True
    )


def parse_response(response_type: Any, text: str, required: bool = True) -> Any:
    """Десериализация тела ответа в ожидаемый тип"""
    try:
        result = TypeAdapter(response_type).validate_json(text)
    except ValidationError as exc:
        raise DeserializationError(f"Failed to deserialize response: {exc}") from exc

    if required and result is None:
        raise DeserializationError("Failed to deserialize response")
    return result


class BaseApiClient:
    """HTTP клиент на базе aiohttp"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[ClientSession] = None,
        retries: int = $retries,
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._headers: Dict[str, str] = dict(headers) if headers else {}
        self._session = session
        self._owns_session = session is None
        self._retries = max(int(retries), 1)

    def update_headers(self, **headers: str) -> "BaseApiClient":
        """Обновление заголовков (например, Authorization)"""
        self._headers.update(headers)
        return self

    async def _ensure_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession()
            self._owns_session = True
        return self._session

    async def _send(
        self,
        method: str,
        url: str,
        content: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        session = await self._ensure_session()

        request_kwargs: Dict[str, Any] = {
            "method": method,
            "url": f"{self._base_url}{url}",
            "headers": dict(self._headers),
        }
        if content is not None:
            request_kwargs["data"] = content.encode("utf-8")
            if content:
                request_kwargs["headers"]["Content-Type"] = "application/json"
        if timeout is not None:
            request_kwargs["timeout"] = ClientTimeout(total=timeout)

        retries = self._retries
        while True:
            try:
                async with session.request(**request_kwargs) as response:
                    text = await response.text()
                    return ApiResponse(response.status, response.headers, text)
            except (ClientError, asyncio.TimeoutError) as exc:
                retries -= 1
                if not retries:
                    raise
                logger.warning(f"Request failed (retries left: {retries}): {exc}")
                await asyncio.sleep(0.5)

    async def _ensure_success(self, response: ApiResponse) -> None:
        if not response.is_success:
$error_logging            raise ApiRequestError(response.status_code, response.text)

    async def close(self) -> None:
        """Закрытие сессии, если она создана клиентом"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
''')

    error_logging = (
        "            logger.error(\n"
        '                f"API request failed with status {response.status_code}: "\n'
        '                f"{response.text}"\n'
        "            )\n"
    )

    client_imports = [
        "import json",
        "import logging",
        "from datetime import date, datetime, time",
        "from decimal import Decimal",
        "from typing import Any, Dict, List, Optional",
        "from uuid import UUID",
        "",
        "from .common import BaseApiClient, build_query, parse_response, serialize_value",
    ]

    package_init = """from .client import ApiClient
from .common import ApiRequestError, DeserializationError
from . import models

__all__ = ["ApiClient", "ApiRequestError", "DeserializationError", "models"]"""

    def render_common(self, options: GeneratorOptions) -> str:
        return self.common.substitute(
            retries=3 if options.enable_retry_policy else 1,
            error_logging=self.error_logging if options.enable_logging else "",
        )


templates = Templates()
