"""
Typed NCBI E-utilities client.

One method per endpoint:
  1. esearch: query → PMIDs and total count
  2. efetch: PMIDs → raw PubMed XML
  3. esummary: PMIDs → document summaries
  4. elink: PMIDs → related/linked records
  5. espell: query → spelling suggestion

Every call carries the tool name, contact email and (if configured) API key,
and goes through the shared rate limiter in BaseClient.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from literature_scout.constants import (
    EFETCH_URL,
    ELINK_URL,
    ESEARCH_URL,
    ESPELL_URL,
    ESUMMARY_URL,
)
from literature_scout.data_sources.base_client import BaseClient
from literature_scout.exceptions import RetrievalError
from literature_scout.models.model_eutils import (
    ELinkResult,
    ESearchResult,
    ESpellResult,
    ESummaryDocument,
)


class EUtilitiesClient(BaseClient):
    """Client for the NCBI E-utilities endpoints used against PubMed."""

    DB = "pubmed"

    @property
    def _source_name(self) -> str:
        return "eutils"

    def _common_params(self, **params: Any) -> dict[str, Any]:
        """Attach identification parameters; None values are dropped."""
        merged = {"tool": self.settings.tool_name, **params}
        if self.settings.contact_email:
            merged["email"] = self.settings.contact_email
        if self.settings.ncbi_api_key:
            merged["api_key"] = self.settings.ncbi_api_key
        return {k: v for k, v in merged.items() if v is not None}

    async def esearch(
        self, term: str, retmax: int = 20, retstart: int = 0, **extra: Any
    ) -> ESearchResult:
        params = self._common_params(
            db=self.DB,
            term=term,
            retmode="json",
            retmax=retmax,
            retstart=retstart,
            **extra,
        )
        data = await self._rest_get("esearch", ESEARCH_URL, params)
        return ESearchResult.from_response(data)

    async def efetch(self, ids: list[str], retmode: str = "xml", **extra: Any) -> str:
        params = self._common_params(
            db=self.DB,
            id=",".join(ids),
            retmode=retmode,
            **extra,
        )
        return await self._rest_get_xml("efetch", EFETCH_URL, params)

    async def esummary(self, ids: list[str]) -> list[ESummaryDocument]:
        params = self._common_params(
            db=self.DB,
            id=",".join(ids),
            retmode="json",
            version="2.0",
        )
        data = await self._rest_get("esummary", ESUMMARY_URL, params)
        return ESummaryDocument.list_from_response(data)

    async def elink(
        self, ids: list[str], cmd: str = "neighbor", linkname: str | None = None
    ) -> ELinkResult:
        params = self._common_params(
            dbfrom=self.DB,
            db=self.DB,
            id=",".join(ids),
            cmd=cmd,
            linkname=linkname,
            retmode="json",
        )
        data = await self._rest_get("elink", ELINK_URL, params)
        return ELinkResult.from_response(data)

    async def espell(self, term: str) -> ESpellResult:
        # ESpell only speaks XML
        params = self._common_params(db=self.DB, term=term)
        xml_text = await self._rest_get_xml("espell", ESPELL_URL, params)
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as e:
            raise RetrievalError("espell", f"Failed to parse XML: {e}") from e
        return ESpellResult(
            query=root.findtext("Query") or term,
            corrected_query=root.findtext("CorrectedQuery") or "",
        )
