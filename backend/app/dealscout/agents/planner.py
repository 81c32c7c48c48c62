"""Planner agent: natural-language query to extraction plan."""

from __future__ import annotations

import json
import logging
from string import Template
from typing import Any, Dict, FrozenSet, List, Optional

from dealscout.agents.lib_agent.agent_prompt_loader import AgentPromptLoader
from dealscout.agents.lib_agent.base_llm import BaseLLM
from dealscout.agents.plan_interpreter import interpret_plan
from dealscout.services.product_search.models import DEFAULT_POLICY, Plan, SearchPolicy
from dealscout.services.product_search.tools import (
    PLAN_TOOLS,
    PRODUCT_SCRAPER,
    PRODUCT_SCRAPER_SCHEMA,
)

logger = logging.getLogger("product_search.planner")

TOOL_DESCRIPTIONS = {
    PRODUCT_SCRAPER: (
        "Search Amazon.in and/or Flipkart and return matching products.",
        PRODUCT_SCRAPER_SCHEMA,
    ),
}


class QueryPlanner:
    """Ask the LLM for a plan and validate what comes back."""

    name = "planner"

    def __init__(
        self,
        llm: BaseLLM,
        prompt_loader: Optional[AgentPromptLoader] = None,
        known_tools: FrozenSet[str] = PLAN_TOOLS,
        policy: SearchPolicy = DEFAULT_POLICY,
    ) -> None:
        self.llm = llm
        self.prompt_loader = prompt_loader or AgentPromptLoader()
        self.known_tools = known_tools
        self.policy = policy

    def build_messages(self, query: str) -> List[Dict[str, Any]]:
        """System prompt listing the tools, then the user query."""
        tools = "\n".join(
            f'- "{name}": {description}\n  args schema: {json.dumps(schema)}'
            for name, (description, schema) in TOOL_DESCRIPTIONS.items()
            if name in self.known_tools
        )
        system = Template(self.prompt_loader.get_system_prompt(self.name)).safe_substitute(
            tools=tools
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": query},
        ]

    def plan(self, query: str) -> Plan:
        """Return a validated plan for ``query``.

        Raises PlanParseError / UnknownToolError when the LLM output is unusable.
        """
        raw = self.llm.complete(self.build_messages(query))
        logger.debug("Planner raw output: %s", raw)
        return interpret_plan(raw, query, self.known_tools, self.policy)
