"""
Pydantic models for NCBI E-utilities JSON responses.

Only the fields we read are modelled; everything else in the payload is
ignored. Numeric fields arrive as strings and are coerced by pydantic.
"""

from typing import Any

from pydantic import BaseModel


class ESearchResult(BaseModel):
    """The ``esearchresult`` object of an ESearch response."""

    count: int = 0
    retmax: int = 0
    retstart: int = 0
    idlist: list[str] = []
    querytranslation: str = ""

    @classmethod
    def from_response(cls, data: dict[str, Any] | None) -> "ESearchResult":
        payload = (data or {}).get("esearchresult") or {}
        # Error responses carry "ERROR" and no counts
        return cls.model_validate(
            {k: v for k, v in payload.items() if k in cls.model_fields and v is not None}
        )


class ESummaryDocument(BaseModel):
    """One document summary from ESummary (version 2.0 JSON)."""

    uid: str
    title: str = ""
    fulljournalname: str = ""
    source: str = ""
    pubdate: str = ""
    pubtype: list[str] = []

    @classmethod
    def list_from_response(cls, data: dict[str, Any] | None) -> list["ESummaryDocument"]:
        result = (data or {}).get("result") or {}
        uids = result.get("uids", [])
        return [
            cls.model_validate(result[uid])
            for uid in uids
            if isinstance(result.get(uid), dict)
        ]


class ELinkResult(BaseModel):
    """Linked ids for one source id set, grouped by link name."""

    dbfrom: str = ""
    ids: list[str] = []
    links: dict[str, list[str]] = {}

    @classmethod
    def from_response(cls, data: dict[str, Any] | None) -> "ELinkResult":
        linksets = (data or {}).get("linksets") or []
        if not linksets:
            return cls()
        linkset = linksets[0]
        links = {
            db.get("linkname", ""): [str(i) for i in db.get("links", [])]
            for db in linkset.get("linksetdbs", [])
        }
        return cls(
            dbfrom=linkset.get("dbfrom", ""),
            ids=[str(i) for i in linkset.get("ids", [])],
            links=links,
        )


class ESpellResult(BaseModel):
    """Spelling suggestion for a query."""

    query: str = ""
    corrected_query: str = ""

    @property
    def has_correction(self) -> bool:
        return bool(self.corrected_query) and self.corrected_query != self.query
