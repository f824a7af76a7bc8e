from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(_ReportModel):
    line: int
    column: int


class Range(_ReportModel):
    file: str
    start: Position
    end: Position


class QueryType(str, Enum):
    UNKNOWN = "unknown"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    SELECT = "select"


class Call(_ReportModel):
    function_id: str
    position: Range
    in_loop: bool


class Query(_ReportModel):
    table_id: str
    position: Range
    type: QueryType
    raw: str
    in_loop: bool


class Function(_ReportModel):
    id: str
    position: Range
    name: str
    calls: list[Call]
    queries: list[Query]


class Table(_ReportModel):
    id: str
    name: str


class CrudResponse(_ReportModel):
    functions: list[Function]
    tables: list[Table]
