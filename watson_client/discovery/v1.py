"""Discovery v1 bindings: environments, configurations, collections,
documents and queries.

WHY: Discovery is a dated REST API (every call carries ?version=<date>)
with a strict resource hierarchy (environment → collection → document).
This module maps each operation onto that hierarchy.

HOW: One async method per operation on top of WatsonService. Documents are
uploaded as multipart/form-data with a "file" part and an optional JSON
"metadata" part. query() sends its parameters in declaration order after
the version parameter.

RULES:
- version_date is required at construction
- Environment and collection IDs are required wherever they appear in the path
- Document files may be given as a path, an open binary file or bytes
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, BinaryIO, Union

from watson_client.api.service import WatsonService, compact
from watson_client.config import DISCOVERY_PREFIX

DocumentFile = Union[str, Path, bytes, BinaryIO]


class DiscoveryV1(WatsonService):
    """Async client for the Watson Discovery v1 API."""

    CREDENTIALS_PREFIX = DISCOVERY_PREFIX
    REQUIRES_VERSION_DATE = True

    VERSION_DATE_2017_04_27 = "2017-04-27"
    VERSION_DATE_2016_12_15 = "2016-12-15"

    VERSION_DATE_HINT = "DiscoveryV1.VERSION_DATE_2016_12_15"

    # ------------------------------------------------------------------
    # Environments
    # ------------------------------------------------------------------

    async def get_environments(self, name: str | None = None) -> dict:
        return await self._request("GET", "/v1/environments", params={"name": name})

    async def create_environment(
        self,
        name: str | None = None,
        description: str | None = None,
        size: int | None = None,
    ) -> dict:
        body = compact(name=name, description=description, size=size)
        return await self._request("POST", "/v1/environments", json=body)

    async def get_environment(self, environment_id: str) -> dict:
        self._require(environment_id=environment_id)
        return await self._request("GET", self._path("v1", "environments", environment_id))

    async def update_environment(
        self,
        environment_id: str,
        name: str | None = None,
        description: str | None = None,
    ) -> dict:
        self._require(environment_id=environment_id)
        body = compact(name=name, description=description)
        return await self._request(
            "PUT", self._path("v1", "environments", environment_id), json=body
        )

    async def delete_environment(self, environment_id: str) -> Any:
        self._require(environment_id=environment_id)
        return await self._request("DELETE", self._path("v1", "environments", environment_id))

    # ------------------------------------------------------------------
    # Configurations
    # ------------------------------------------------------------------

    async def get_configurations(self, environment_id: str, name: str | None = None) -> dict:
        self._require(environment_id=environment_id)
        return await self._request(
            "GET",
            self._path("v1", "environments", environment_id, "configurations"),
            params={"name": name},
        )

    async def get_configuration(self, environment_id: str, configuration_id: str) -> dict:
        self._require(environment_id=environment_id, configuration_id=configuration_id)
        return await self._request(
            "GET",
            self._path("v1", "environments", environment_id, "configurations", configuration_id),
        )

    async def create_configuration(self, environment_id: str, configuration: dict) -> dict:
        """Create a configuration from a full configuration document."""
        self._require(environment_id=environment_id, configuration=configuration)
        return await self._request(
            "POST",
            self._path("v1", "environments", environment_id, "configurations"),
            json=configuration,
        )

    async def update_configuration(
        self, environment_id: str, configuration_id: str, configuration: dict
    ) -> dict:
        self._require(
            environment_id=environment_id,
            configuration_id=configuration_id,
            configuration=configuration,
        )
        return await self._request(
            "PUT",
            self._path("v1", "environments", environment_id, "configurations", configuration_id),
            json=configuration,
        )

    async def delete_configuration(self, environment_id: str, configuration_id: str) -> Any:
        self._require(environment_id=environment_id, configuration_id=configuration_id)
        return await self._request(
            "DELETE",
            self._path("v1", "environments", environment_id, "configurations", configuration_id),
        )

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def get_collections(self, environment_id: str, name: str | None = None) -> dict:
        self._require(environment_id=environment_id)
        return await self._request(
            "GET",
            self._path("v1", "environments", environment_id, "collections"),
            params={"name": name},
        )

    async def get_collection(self, environment_id: str, collection_id: str) -> dict:
        self._require(environment_id=environment_id, collection_id=collection_id)
        return await self._request(
            "GET", self._path("v1", "environments", environment_id, "collections", collection_id)
        )

    async def create_collection(
        self,
        environment_id: str,
        name: str,
        description: str | None = None,
        configuration_id: str | None = None,
        language_code: str | None = None,
    ) -> dict:
        self._require(environment_id=environment_id, name=name)
        body = compact(
            name=name,
            description=description,
            configuration_id=configuration_id,
            language=language_code,
        )
        return await self._request(
            "POST",
            self._path("v1", "environments", environment_id, "collections"),
            json=body,
        )

    async def update_collection(
        self,
        environment_id: str,
        collection_id: str,
        name: str | None = None,
        description: str | None = None,
        configuration_id: str | None = None,
    ) -> dict:
        self._require(environment_id=environment_id, collection_id=collection_id)
        body = compact(name=name, description=description, configuration_id=configuration_id)
        return await self._request(
            "PUT",
            self._path("v1", "environments", environment_id, "collections", collection_id),
            json=body,
        )

    async def delete_collection(self, environment_id: str, collection_id: str) -> Any:
        self._require(environment_id=environment_id, collection_id=collection_id)
        return await self._request(
            "DELETE",
            self._path("v1", "environments", environment_id, "collections", collection_id),
        )

    async def get_collection_fields(self, environment_id: str, collection_id: str) -> dict:
        """List the fields indexed in a collection, with their types."""
        self._require(environment_id=environment_id, collection_id=collection_id)
        return await self._request(
            "GET",
            self._path(
                "v1", "environments", environment_id, "collections", collection_id, "fields"
            ),
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def add_document(
        self,
        environment_id: str,
        collection_id: str,
        file: DocumentFile | None = None,
        metadata: dict | None = None,
        configuration_id: str | None = None,
        filename: str | None = None,
    ) -> dict:
        """Upload a document for ingestion into a collection.

        WHY: Discovery ingests documents asynchronously; the response only
        carries the new document_id and its processing status.

        HOW: Sends a multipart POST with the document in the "file" part
        and metadata serialized into a JSON "metadata" part.

        RULES:
        - At least one of file and metadata must be given
        - configuration_id overrides the collection's configuration for
          this document only
        """
        self._require(environment_id=environment_id, collection_id=collection_id)
        if file is None and metadata is None:
            self._require(file=file)
        path = self._path(
            "v1", "environments", environment_id, "collections", collection_id, "documents"
        )
        return await self._upload_document(path, file, metadata, configuration_id, filename)

    async def update_document(
        self,
        environment_id: str,
        collection_id: str,
        document_id: str,
        file: DocumentFile | None = None,
        metadata: dict | None = None,
        configuration_id: str | None = None,
        filename: str | None = None,
    ) -> dict:
        self._require(
            environment_id=environment_id,
            collection_id=collection_id,
            document_id=document_id,
        )
        if file is None and metadata is None:
            self._require(file=file)
        path = self._path(
            "v1",
            "environments",
            environment_id,
            "collections",
            collection_id,
            "documents",
            document_id,
        )
        return await self._upload_document(path, file, metadata, configuration_id, filename)

    async def get_document(
        self, environment_id: str, collection_id: str, document_id: str
    ) -> dict:
        """Return the ingestion status of a document."""
        self._require(
            environment_id=environment_id,
            collection_id=collection_id,
            document_id=document_id,
        )
        return await self._request(
            "GET",
            self._path(
                "v1",
                "environments",
                environment_id,
                "collections",
                collection_id,
                "documents",
                document_id,
            ),
        )

    async def delete_document(
        self, environment_id: str, collection_id: str, document_id: str
    ) -> Any:
        self._require(
            environment_id=environment_id,
            collection_id=collection_id,
            document_id=document_id,
        )
        return await self._request(
            "DELETE",
            self._path(
                "v1",
                "environments",
                environment_id,
                "collections",
                collection_id,
                "documents",
                document_id,
            ),
        )

    async def _upload_document(
        self,
        path: str,
        file: DocumentFile | None,
        metadata: dict | None,
        configuration_id: str | None,
        filename: str | None,
    ) -> dict:
        params = {"configuration_id": configuration_id}
        parts: dict[str, Any] = {}
        if metadata is not None:
            parts["metadata"] = (None, json.dumps(metadata), "application/json")

        if isinstance(file, (str, Path)):
            file_path = Path(file)
            with open(file_path, "rb") as f:
                parts["file"] = (filename or file_path.name, f)
                return await self._request("POST", path, params=params, files=parts)

        if isinstance(file, (bytes, bytearray)):
            parts["file"] = (filename or "document", bytes(file))
        elif file is not None:
            name = filename or Path(getattr(file, "name", "document")).name
            parts["file"] = (name, file)
        return await self._request("POST", path, params=params, files=parts)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(
        self,
        environment_id: str,
        collection_id: str,
        filter: str | None = None,  # noqa: A002
        query: str | None = None,
        natural_language_query: str | None = None,
        aggregation: str | None = None,
        count: int | None = None,
        return_fields: str | list[str] | None = None,
        offset: int | None = None,
        sort: str | list[str] | None = None,
        passages: bool | None = None,
        highlight: bool | None = None,
    ) -> dict:
        """Search a collection.

        return_fields is sent as the "return" parameter (a Python keyword).
        """
        self._require(environment_id=environment_id, collection_id=collection_id)
        params = {
            "filter": filter,
            "query": query,
            "natural_language_query": natural_language_query,
            "aggregation": aggregation,
            "count": count,
            "return": return_fields,
            "offset": offset,
            "sort": sort,
            "passages": passages,
            "highlight": highlight,
        }
        return await self._request(
            "GET",
            self._path(
                "v1", "environments", environment_id, "collections", collection_id, "query"
            ),
            params=params,
        )
