#!/usr/bin/env python3
"""
Todo list CLI backed by a MySQL or PostgreSQL add-on.

Usage:
    sql-todo list                      - Show all todos
    sql-todo add "Task description"    - Add a new todo
    sql-todo toggle <id>               - Toggle todo status (completed/pending)
    sql-todo delete <id>               - Delete a todo
    sql-todo stats                     - Show statistics
    sql-todo help                      - Show this help

Tables:
    todos - id, task, completed flag, creation timestamp
"""

import argparse
import sys
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from addons.logging_config import setup_logging, get_logger
from addons.prompts import PromptCancelled, CANCELLED_MESSAGE
from addons.schemas import DbType, Todo, TodoStats
from addons.sql_connect import db_connect, get_db, UnsupportedDatabaseError

logger = get_logger(__name__)

CREATE_TABLE_SQL = {
    DbType.POSTGRESQL: """
        CREATE TABLE IF NOT EXISTS todos (
            id SERIAL PRIMARY KEY,
            task VARCHAR(255) NOT NULL,
            completed BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
    DbType.MYSQL: """
        CREATE TABLE IF NOT EXISTS todos (
            id INT AUTO_INCREMENT PRIMARY KEY,
            task VARCHAR(255) NOT NULL,
            completed BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """,
}

RULE = "─" * 50


class TodoApp:
    def __init__(self, engine: Engine, db_type: DbType):
        self.engine = engine
        self.db_type = db_type

    def validate_todo_id(self, raw: Optional[str]) -> Optional[int]:
        """Parse a todo ID from the command line; prints an error and returns None if invalid."""
        try:
            todo_id = int(raw)
        except (TypeError, ValueError):
            todo_id = 0

        if todo_id <= 0:
            print("❌ Please provide a valid todo ID")
            return None
        return todo_id

    def find_todo(self, todo_id: int) -> Optional[Todo]:
        with get_db(self.engine) as conn:
            row = conn.execute(
                text("SELECT id, completed, task, created_at FROM todos WHERE id = :id"),
                {"id": todo_id},
            ).mappings().first()

        if row is None:
            print(f"❌ Todo with ID {todo_id} not found")
            return None
        return Todo(**row)

    def setup_database(self):
        """Create the todos table if it doesn't exist."""
        if self.db_type not in CREATE_TABLE_SQL:
            raise ValueError(f"Unsupported database type: {self.db_type}")

        print("🔧 Setting up database…")
        with get_db(self.engine) as conn:
            conn.execute(text(CREATE_TABLE_SQL[self.db_type]))
        print("✅ Database setup complete")

    def add_todo(self, task: str) -> int:
        """Insert a todo. Returns its ID."""
        with get_db(self.engine) as conn:
            if self.db_type == DbType.POSTGRESQL:
                todo_id = conn.execute(
                    text("INSERT INTO todos (task) VALUES (:task) RETURNING id"),
                    {"task": task},
                ).scalar()
            elif self.db_type == DbType.MYSQL:
                conn.execute(text("INSERT INTO todos (task) VALUES (:task)"), {"task": task})
                # LAST_INSERT_ID is per connection, so it must run on the same one
                todo_id = conn.execute(text("SELECT LAST_INSERT_ID() AS id")).scalar()
            else:
                raise ValueError(f"Unsupported database type: {self.db_type}")

        print(f'📝 Added todo: "{task}" (ID: {todo_id})')
        return todo_id

    def list_todos(self) -> List[Todo]:
        with get_db(self.engine) as conn:
            rows = conn.execute(
                text("SELECT id, task, completed, created_at FROM todos ORDER BY created_at DESC")
            ).mappings().all()
        todos = [Todo(**row) for row in rows]

        print("\n📋 Todo List:")
        print(RULE)
        if not todos:
            print('   No todos found. Add some with: sql-todo add "Your task"')
            return todos

        for todo in todos:
            print(f"{todo.status_icon} [{todo.id}] {todo.task} ({todo.date_label})")
        return todos

    def toggle_todo(self, todo_id: int) -> Optional[Todo]:
        """Flip a todo between completed and pending. Returns the updated todo."""
        todo = self.find_todo(todo_id)
        if todo is None:
            return None

        new_status = not todo.completed
        with get_db(self.engine) as conn:
            conn.execute(
                text("UPDATE todos SET completed = :completed WHERE id = :id"),
                {"completed": new_status, "id": todo_id},
            )

        updated = todo.model_copy(update={"completed": new_status})
        status_text = "completed" if new_status else "pending"
        print(f'{updated.status_icon} Marked todo {todo_id} as {status_text}: "{todo.task}"')
        return updated

    def delete_todo(self, todo_id: int) -> bool:
        todo = self.find_todo(todo_id)
        if todo is None:
            return False

        with get_db(self.engine) as conn:
            conn.execute(text("DELETE FROM todos WHERE id = :id"), {"id": todo_id})
        print(f"🗑️ Deleted todo {todo_id}")
        return True

    def get_stats(self) -> TodoStats:
        with get_db(self.engine) as conn:
            total = conn.execute(text("SELECT COUNT(*) AS total FROM todos")).scalar()
            completed = conn.execute(
                text("SELECT COUNT(*) AS completed FROM todos WHERE completed = TRUE")
            ).scalar()
            pending = conn.execute(
                text("SELECT COUNT(*) AS pending FROM todos WHERE completed = FALSE")
            ).scalar()
        return TodoStats(total=total or 0, completed=completed or 0, pending=pending or 0)

    def show_stats(self) -> TodoStats:
        stats = self.get_stats()
        print("\n📊 Statistics:")
        print(f"   Total tasks: {stats.total}")
        print(f"   Completed: {stats.completed}")
        print(f"   Pending: {stats.pending}")
        return stats

    def show_help(self):
        print("\n📚 Todo CLI - Usage:")
        print("   sql-todo list                      - Show all todos")
        print('   sql-todo add "Task description"    - Add a new todo')
        print("   sql-todo toggle <id>               - Toggle todo status (completed/pending)")
        print("   sql-todo delete <id>               - Delete a todo")
        print("   sql-todo stats                     - Show statistics")
        print("   sql-todo help                      - Show this help")


def dispatch(app: TodoApp, command: Optional[str], args: List[str]):
    """Run one subcommand. The table is created first if needed."""
    app.setup_database()

    if command == "add":
        if not args:
            print("❌ Please provide a task description")
            return
        app.add_todo(" ".join(args))
    elif command in ("list", None):
        app.list_todos()
    elif command == "toggle":
        todo_id = app.validate_todo_id(args[0] if args else None)
        if todo_id:
            app.toggle_todo(todo_id)
    elif command == "delete":
        todo_id = app.validate_todo_id(args[0] if args else None)
        if todo_id:
            app.delete_todo(todo_id)
    elif command == "stats":
        app.show_stats()
    else:
        app.show_help()


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(prog="sql-todo", description="Todo list on MySQL/PostgreSQL", add_help=False)
    parser.add_argument("command", nargs="?")
    parser.add_argument("args", nargs="*")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_intermixed_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        engine, db_type = db_connect()
    except PromptCancelled:
        print(CANCELLED_MESSAGE)
        sys.exit(0)
    except UnsupportedDatabaseError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    app = TodoApp(engine, db_type)
    logger.debug("Running %s on %s", args.command or "list", db_type.value)

    try:
        dispatch(app, args.command, args.args)
    except (SQLAlchemyError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
