"""Matrix column query scopes."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Table

from deep.models.matrix import MatrixCol
from deep.query.spec import QuerySpec, as_list

matrix_cols: Table = MatrixCol.__table__  # type: ignore[assignment]


class MatrixColQuery:
    """Chainable filters over ``matrix_cols``, ordered by ``col_order``."""

    def __init__(self, spec: QuerySpec | None = None) -> None:
        self.spec = spec if spec is not None else QuerySpec(
            source=matrix_cols, columns=(MatrixCol,),
        ).order_by(matrix_cols.c.col_order.asc(), matrix_cols.c.col_id.asc())

    def field_id(self, field_id: Any) -> MatrixColQuery:
        return MatrixColQuery(self.spec.where(matrix_cols.c.field_id.in_(as_list(field_id))))

    def col_id(self, col_id: Any) -> MatrixColQuery:
        return MatrixColQuery(self.spec.where(matrix_cols.c.col_id.in_(as_list(col_id))))

    def to_select(self):
        return self.spec.to_select()
