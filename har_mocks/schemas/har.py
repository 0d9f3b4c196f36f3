"""
HAR archive models.

A HAR file is the capture resource produced by the browser recorder: an
ordered list of request/response exchanges. Only the fields the pipeline
reads are modeled; everything else (headers, timings, cookies, pages) is kept
as extra data so a merged archive is written back without loss.

Bodies:
- request.postData.text   -> request body text (absent for GET, or not captured)
- response.content.text   -> response body text (absent when not embedded)
"""

from __future__ import annotations

from collections.abc import Sequence

import pydantic

from har_mocks.base_model import PermissiveModel


class HarPostData(PermissiveModel):
    """Request body as recorded."""

    text: str | None = None


class HarRequest(PermissiveModel):
    """Request half of an exchange."""

    method: str = ''
    url: str = ''
    post_data: HarPostData | None = pydantic.Field(default=None, alias='postData')


class HarContent(PermissiveModel):
    """Response content; text is only present when recorded with embedded content."""

    text: str | None = None


class HarResponse(PermissiveModel):
    """Response half of an exchange."""

    content: HarContent = pydantic.Field(default_factory=HarContent)


class HarEntry(PermissiveModel):
    """
    One captured exchange.

    Immutable once captured: the merger substitutes whole entries, it never
    edits them.
    """

    request: HarRequest = pydantic.Field(default_factory=HarRequest)
    response: HarResponse = pydantic.Field(default_factory=HarResponse)

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def request_body(self) -> str | None:
        return self.request.post_data.text if self.request.post_data else None

    @property
    def response_body(self) -> str | None:
        return self.response.content.text


class HarLog(PermissiveModel):
    """The HAR `log` object. Entry order is significant (merge output order)."""

    entries: Sequence[HarEntry] = ()


class HarArchive(PermissiveModel):
    """Root HAR document."""

    log: HarLog = pydantic.Field(default_factory=HarLog)

    @property
    def entries(self) -> Sequence[HarEntry]:
        return self.log.entries

    def with_entries(self, entries: Sequence[HarEntry]) -> HarArchive:
        """Copy of this archive (envelope preserved) with a different entry list."""
        return self.model_copy(update={'log': self.log.model_copy(update={'entries': tuple(entries)})})

    @classmethod
    def empty(cls) -> HarArchive:
        return cls(log=HarLog(entries=()))

    @classmethod
    def from_entries(cls, entries: Sequence[HarEntry]) -> HarArchive:
        return cls(log=HarLog(entries=tuple(entries)))
