"""Conversation v1 bindings: messages, workspaces, intents, examples.

WHY: A Conversation workspace is edited and queried through ~25 small REST
operations. Each one only needs its path and its fields; the shared core
does the rest.

HOW: One async method per operation. Path parameters (workspace IDs,
intent names, example texts) are percent-encoded by _path(), optional
fields are dropped from bodies by compact(), list paging parameters go to
the query string.

RULES:
- version_date is required at construction (use a VERSION_DATE_* constant)
- Update operations address the object by its old name (old_intent,
  old_text) and send the new values in the body
- Example and counterexample texts may contain any character
"""

from __future__ import annotations

from typing import Any

from watson_client.api.service import WatsonService, compact
from watson_client.config import CONVERSATION_PREFIX


class ConversationV1(WatsonService):
    """Async client for the Watson Conversation v1 API."""

    CREDENTIALS_PREFIX = CONVERSATION_PREFIX
    REQUIRES_VERSION_DATE = True

    VERSION_DATE_2017_02_03 = "2017-02-03"
    VERSION_DATE_2016_09_20 = "2016-09-20"
    VERSION_DATE_2016_07_11 = "2016-07-11"

    VERSION_DATE_HINT = "ConversationV1.VERSION_DATE_2017_02_03"

    # ------------------------------------------------------------------
    # Message
    # ------------------------------------------------------------------

    async def message(
        self,
        workspace_id: str,
        input: dict | None = None,  # noqa: A002
        alternate_intents: bool | None = None,
        context: dict | None = None,
        entities: list[dict] | None = None,
        intents: list[dict] | None = None,
        output: dict | None = None,
    ) -> dict:
        """Send user input to a workspace and return the dialog response.

        The previous response's context should be passed back in to keep
        the dialog going.
        """
        self._require(workspace_id=workspace_id)
        body = compact(
            input=input,
            alternate_intents=alternate_intents,
            context=context,
            entities=entities,
            intents=intents,
            output=output,
        )
        return await self._request(
            "POST", self._path("v1", "workspaces", workspace_id, "message"), json=body
        )

    # ------------------------------------------------------------------
    # Workspaces
    # ------------------------------------------------------------------

    async def list_workspaces(
        self,
        page_limit: int | None = None,
        include_count: bool | None = None,
        sort: str | None = None,
        cursor: str | None = None,
    ) -> dict:
        params = {
            "page_limit": page_limit,
            "include_count": include_count,
            "sort": sort,
            "cursor": cursor,
        }
        return await self._request("GET", "/v1/workspaces", params=params)

    async def create_workspace(
        self,
        name: str | None = None,
        description: str | None = None,
        language: str | None = None,
        intents: list[dict] | None = None,
        entities: list[dict] | None = None,
        dialog_nodes: list[dict] | None = None,
        counterexamples: list[dict] | None = None,
        metadata: dict | None = None,
    ) -> dict:
        body = compact(
            name=name,
            description=description,
            language=language,
            intents=intents,
            entities=entities,
            dialog_nodes=dialog_nodes,
            counterexamples=counterexamples,
            metadata=metadata,
        )
        return await self._request("POST", "/v1/workspaces", json=body)

    async def get_workspace(self, workspace_id: str, export: bool | None = None) -> dict:
        """Fetch a workspace; export=True includes its full content."""
        self._require(workspace_id=workspace_id)
        return await self._request(
            "GET", self._path("v1", "workspaces", workspace_id), params={"export": export}
        )

    async def update_workspace(
        self,
        workspace_id: str,
        name: str | None = None,
        description: str | None = None,
        language: str | None = None,
        intents: list[dict] | None = None,
        entities: list[dict] | None = None,
        dialog_nodes: list[dict] | None = None,
        counterexamples: list[dict] | None = None,
        metadata: dict | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id)
        body = compact(
            name=name,
            description=description,
            language=language,
            intents=intents,
            entities=entities,
            dialog_nodes=dialog_nodes,
            counterexamples=counterexamples,
            metadata=metadata,
        )
        return await self._request(
            "POST", self._path("v1", "workspaces", workspace_id), json=body
        )

    async def workspace_status(self, workspace_id: str) -> dict:
        """Return workspace metadata, including its training status."""
        self._require(workspace_id=workspace_id)
        return await self._request("GET", self._path("v1", "workspaces", workspace_id))

    async def delete_workspace(self, workspace_id: str) -> Any:
        self._require(workspace_id=workspace_id)
        return await self._request("DELETE", self._path("v1", "workspaces", workspace_id))

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    async def get_intents(
        self,
        workspace_id: str,
        export: bool | None = None,
        page_limit: int | None = None,
        include_count: bool | None = None,
        sort: str | None = None,
        cursor: str | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id)
        params = {
            "export": export,
            "page_limit": page_limit,
            "include_count": include_count,
            "sort": sort,
            "cursor": cursor,
        }
        return await self._request(
            "GET", self._path("v1", "workspaces", workspace_id, "intents"), params=params
        )

    async def create_intent(
        self,
        workspace_id: str,
        intent: str,
        description: str | None = None,
        examples: list[dict] | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id, intent=intent)
        body = compact(intent=intent, description=description, examples=examples)
        return await self._request(
            "POST", self._path("v1", "workspaces", workspace_id, "intents"), json=body
        )

    async def get_intent(self, workspace_id: str, intent: str, export: bool | None = None) -> dict:
        self._require(workspace_id=workspace_id, intent=intent)
        return await self._request(
            "GET",
            self._path("v1", "workspaces", workspace_id, "intents", intent),
            params={"export": export},
        )

    async def update_intent(
        self,
        workspace_id: str,
        old_intent: str,
        intent: str | None = None,
        description: str | None = None,
        examples: list[dict] | None = None,
    ) -> dict:
        """Rename and/or rewrite the intent currently named old_intent."""
        self._require(workspace_id=workspace_id, old_intent=old_intent)
        body = compact(intent=intent, description=description, examples=examples)
        return await self._request(
            "POST",
            self._path("v1", "workspaces", workspace_id, "intents", old_intent),
            json=body,
        )

    async def delete_intent(self, workspace_id: str, intent: str) -> Any:
        self._require(workspace_id=workspace_id, intent=intent)
        return await self._request(
            "DELETE", self._path("v1", "workspaces", workspace_id, "intents", intent)
        )

    # ------------------------------------------------------------------
    # Examples
    # ------------------------------------------------------------------

    async def get_examples(
        self,
        workspace_id: str,
        intent: str,
        page_limit: int | None = None,
        include_count: bool | None = None,
        sort: str | None = None,
        cursor: str | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id, intent=intent)
        params = {
            "page_limit": page_limit,
            "include_count": include_count,
            "sort": sort,
            "cursor": cursor,
        }
        return await self._request(
            "GET",
            self._path("v1", "workspaces", workspace_id, "intents", intent, "examples"),
            params=params,
        )

    async def create_example(self, workspace_id: str, intent: str, text: str) -> dict:
        self._require(workspace_id=workspace_id, intent=intent, text=text)
        return await self._request(
            "POST",
            self._path("v1", "workspaces", workspace_id, "intents", intent, "examples"),
            json={"text": text},
        )

    async def get_example(self, workspace_id: str, intent: str, text: str) -> dict:
        self._require(workspace_id=workspace_id, intent=intent, text=text)
        return await self._request(
            "GET",
            self._path("v1", "workspaces", workspace_id, "intents", intent, "examples", text),
        )

    async def update_example(
        self, workspace_id: str, intent: str, old_text: str, text: str
    ) -> dict:
        self._require(workspace_id=workspace_id, intent=intent, old_text=old_text, text=text)
        return await self._request(
            "POST",
            self._path(
                "v1", "workspaces", workspace_id, "intents", intent, "examples", old_text
            ),
            json={"text": text},
        )

    async def delete_example(self, workspace_id: str, intent: str, text: str) -> Any:
        self._require(workspace_id=workspace_id, intent=intent, text=text)
        return await self._request(
            "DELETE",
            self._path("v1", "workspaces", workspace_id, "intents", intent, "examples", text),
        )

    # ------------------------------------------------------------------
    # Counterexamples
    # ------------------------------------------------------------------

    async def get_counterexamples(
        self,
        workspace_id: str,
        page_limit: int | None = None,
        include_count: bool | None = None,
        sort: str | None = None,
        cursor: str | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id)
        params = {
            "page_limit": page_limit,
            "include_count": include_count,
            "sort": sort,
            "cursor": cursor,
        }
        return await self._request(
            "GET",
            self._path("v1", "workspaces", workspace_id, "counterexamples"),
            params=params,
        )

    async def create_counterexample(self, workspace_id: str, text: str) -> dict:
        """Mark text as input that should match no intent."""
        self._require(workspace_id=workspace_id, text=text)
        return await self._request(
            "POST",
            self._path("v1", "workspaces", workspace_id, "counterexamples"),
            json={"text": text},
        )

    async def get_counterexample(self, workspace_id: str, text: str) -> dict:
        self._require(workspace_id=workspace_id, text=text)
        return await self._request(
            "GET", self._path("v1", "workspaces", workspace_id, "counterexamples", text)
        )

    async def update_counterexample(self, workspace_id: str, old_text: str, text: str) -> dict:
        self._require(workspace_id=workspace_id, old_text=old_text, text=text)
        return await self._request(
            "POST",
            self._path("v1", "workspaces", workspace_id, "counterexamples", old_text),
            json={"text": text},
        )

    async def delete_counterexample(self, workspace_id: str, text: str) -> Any:
        self._require(workspace_id=workspace_id, text=text)
        return await self._request(
            "DELETE", self._path("v1", "workspaces", workspace_id, "counterexamples", text)
        )

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    async def get_entities(
        self,
        workspace_id: str,
        export: bool | None = None,
        page_limit: int | None = None,
        include_count: bool | None = None,
        sort: str | None = None,
        cursor: str | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id)
        params = {
            "export": export,
            "page_limit": page_limit,
            "include_count": include_count,
            "sort": sort,
            "cursor": cursor,
        }
        return await self._request(
            "GET", self._path("v1", "workspaces", workspace_id, "entities"), params=params
        )

    async def create_entity(
        self,
        workspace_id: str,
        entity: str,
        description: str | None = None,
        values: list[dict] | None = None,
        metadata: dict | None = None,
        fuzzy_match: bool | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id, entity=entity)
        body = compact(
            entity=entity,
            description=description,
            values=values,
            metadata=metadata,
            fuzzy_match=fuzzy_match,
        )
        return await self._request(
            "POST", self._path("v1", "workspaces", workspace_id, "entities"), json=body
        )

    async def get_entity(self, workspace_id: str, entity: str, export: bool | None = None) -> dict:
        self._require(workspace_id=workspace_id, entity=entity)
        return await self._request(
            "GET",
            self._path("v1", "workspaces", workspace_id, "entities", entity),
            params={"export": export},
        )

    async def update_entity(
        self,
        workspace_id: str,
        old_entity: str,
        entity: str | None = None,
        description: str | None = None,
        values: list[dict] | None = None,
        metadata: dict | None = None,
        fuzzy_match: bool | None = None,
    ) -> dict:
        self._require(workspace_id=workspace_id, old_entity=old_entity)
        body = compact(
            entity=entity,
            description=description,
            values=values,
            metadata=metadata,
            fuzzy_match=fuzzy_match,
        )
        return await self._request(
            "POST",
            self._path("v1", "workspaces", workspace_id, "entities", old_entity),
            json=body,
        )

    async def delete_entity(self, workspace_id: str, entity: str) -> Any:
        self._require(workspace_id=workspace_id, entity=entity)
        return await self._request(
            "DELETE", self._path("v1", "workspaces", workspace_id, "entities", entity)
        )
