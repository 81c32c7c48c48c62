"""Base LLM interface used by the planner and the comparator, plus a test double."""

from typing import Any, Dict, List, Optional


class BaseLLM:
    """Abstract base class for chat/complete-compatible LLMs."""

    def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Generate a text answer from a chat-formatted message history.

        Args:
            messages (List[Dict[str, Any]]): Previous messages in the format
                [{"role": "system"|"user"|"assistant", "content": "..."}].
            response_format (Optional[Dict[str, Any]]): Provider hint for the
                shape of the answer, e.g. {"type": "json_object"}.

        Returns:
            str: Raw text produced by the model. Callers treat it as untrusted.
        """
        raise NotImplementedError


class StaticLLM(BaseLLM):
    """LLM that replays canned answers (no API calls)."""

    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.calls: List[List[Dict[str, Any]]] = []

    def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Return the next canned answer, repeating the last one when exhausted."""
        self.calls.append(messages)
        if not self.answers:
            return ""
        if len(self.answers) > 1:
            return self.answers.pop(0)
        return self.answers[0]
