from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from wildshape.store import ObjRef

TOKEN_TYPE = "graphic"
TABLE_TYPE = "rollabletable"
TABLE_ITEM_TYPE = "tableitem"
PAGE_TYPE = "page"


class HostObject(BaseModel):
    """Typed view over a host attribute map. Unknown attributes are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    type: str = Field(alias="_type")

    @property
    def ref(self) -> ObjRef:
        return ObjRef(type=self.type, id=self.id)


class Token(HostObject):
    name: str = ""
    imgsrc: str = ""
    # 1-based index into the table's items.
    current_side: int = Field(default=0, alias="currentSide")
    sides: str = ""
    width: float = 0
    height: float = 0
    top: float = 0
    left: float = 0
    page_id: str | None = Field(default=None, alias="_pageid")


class RollableTable(HostObject):
    name: str = ""


class TableItem(HostObject):
    table_id: str = Field(alias="_rollabletableid")
    name: str = ""
    avatar: str = ""
    # Repurposed as "grid squares per side".
    weight: float = 1


class Page(HostObject):
    snapping_increment: float = 1


class SelectedRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(alias="_type")
    id: str = Field(alias="_id")


class ChatMessage(BaseModel):
    """An incoming chat message, as the host delivers it."""

    type: str = "general"
    content: str = ""
    who: str | None = None
    selected: list[SelectedRef] = Field(default_factory=list)
