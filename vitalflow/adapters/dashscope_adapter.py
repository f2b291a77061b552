from typing import Any, Callable, Dict, List, Optional

from vitalflow.adapters.base_adapter import ImageAdapter, to_data_url


def _first(items: Any) -> Optional[Dict[str, Any]]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _output(payload: Dict[str, Any]) -> Dict[str, Any]:
    output = payload.get("output")
    return output if isinstance(output, dict) else {}


def _from_image_datum(datum: Optional[Dict[str, Any]]) -> Optional[str]:
    """Handles the {url} / {b64_json, mime_type} datum used by results and data lists."""
    if not datum:
        return None
    if _text(datum.get("url")):
        return datum["url"]
    if _text(datum.get("b64_json")):
        return to_data_url(datum["b64_json"], _text(datum.get("mime_type")))
    return None


def extract_from_choices(payload: Dict[str, Any]) -> Optional[str]:
    """output.choices[0].message.content[].image (qwen-image multimodal generation)"""
    choice = _first(_output(payload).get("choices"))
    if not choice:
        return None
    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list):
        return None
    for part in content:
        if isinstance(part, dict) and _text(part.get("image")):
            return part["image"]
    return None


def extract_from_results(payload: Dict[str, Any]) -> Optional[str]:
    """output.results[0] (wanx text-to-image)"""
    return _from_image_datum(_first(_output(payload).get("results")))


def extract_from_data(payload: Dict[str, Any]) -> Optional[str]:
    """data[0] (OpenAI-style images response)"""
    return _from_image_datum(_first(payload.get("data")))


EXTRACTORS: List[Callable[[Dict[str, Any]], Optional[str]]] = [
    extract_from_choices,
    extract_from_results,
    extract_from_data,
]


class DashScopeImageAdapter(ImageAdapter):
    """
    Adapter for the DashScope multimodal-generation endpoint (Qwen image models).
    """
    def __init__(self, api_key: str, url: str, model: str, size: str, timeout_seconds: float):
        super().__init__(url, timeout_seconds)
        self.api_key = api_key
        self.model = model
        self.size = size

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "input": {
                "messages": [
                    {"role": "user", "content": [{"text": prompt}]}
                ]
            },
            "parameters": {"size": self.size, "n": 1},
        }

    def extract_image(self, payload: Dict[str, Any]) -> Optional[str]:
        for extractor in EXTRACTORS:
            image = extractor(payload)
            if image:
                return image
        return None

    def _get_auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}
