"""
Todo API — Task SQLAlchemy Model
==================================

What:  ORM model for the `tasks` table.
How:   Inherits from Base; Database.ensure_schema() creates the table.

Table Design:
    - id: BIGINT identity on PostgreSQL. SQLite only auto-increments an
      INTEGER PRIMARY KEY, hence the variant.
    - title / description: TEXT, no length limit
    - done: false until PATCH /todos/done/{id}
"""

from sqlalchemy import BigInteger, Boolean, Integer, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.database import Base


class Task(Base):
    """
    A single to-do item.

    Lifecycle:
        1. Created by POST /todos/add (done = False, id assigned by the database)
        2. title/description rewritten by PUT /todos/update/{id}
        3. done set by PATCH /todos/done/{id}
        4. Hard-deleted by DELETE /todos/delete/{id}
    """

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False, default="")

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    done: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', done={self.done})>"
