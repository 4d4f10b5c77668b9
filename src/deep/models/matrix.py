"""Matrix field columns and rows.

A matrix field is a repeating set of rows; ``matrix_cols`` defines its
columns and ``matrix_data`` stores one row per record with the cell values
in ``col_id_<col_id>`` columns.
"""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from deep.orm.base import DeepBase


class MatrixCol(DeepBase):
    __tablename__ = "matrix_cols"

    col_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    field_id: Mapped[int] = mapped_column(Integer, nullable=False)
    var_id: Mapped[int | None] = mapped_column(Integer)
    col_name: Mapped[str] = mapped_column(Text, nullable=False)
    col_label: Mapped[str] = mapped_column(Text, default="", nullable=False)
    col_instructions: Mapped[str | None] = mapped_column(Text)
    col_type: Mapped[str] = mapped_column(Text, default="text", nullable=False)
    col_required: Mapped[str] = mapped_column(Text, default="n", nullable=False)
    col_search: Mapped[str] = mapped_column(Text, default="n", nullable=False)
    col_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    col_width: Mapped[str | None] = mapped_column(Text)
    col_settings: Mapped[str | None] = mapped_column(Text)

    @property
    def column_key(self) -> str:
        """Name of the ``matrix_data`` column holding this column's cells."""
        return f"col_id_{self.col_id}"

    @property
    def property_type(self) -> str:
        return self.col_type

    @property
    def is_required(self) -> bool:
        return self.col_required == "y"

    def __repr__(self) -> str:
        return f"<MatrixCol {self.col_name!r} col_id={self.col_id}>"


class MatrixData(DeepBase):
    __tablename__ = "matrix_data"

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    entry_id: Mapped[int] = mapped_column(Integer, nullable=False)
    field_id: Mapped[int] = mapped_column(Integer, nullable=False)
    var_id: Mapped[int | None] = mapped_column(Integer)
    is_draft: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    row_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
