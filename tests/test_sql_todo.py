"""Tests for the todo list CLI."""

from datetime import datetime

import pytest
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import ProgrammingError

from addons import sql_todo
from addons.schemas import DbType, Todo
from addons.sql_todo import TodoApp, dispatch


def executed_sql(conn):
    """SQL text of every statement run on a mock connection."""
    return [str(c.args[0]) for c in conn.execute.call_args_list]


def result(scalar=None, first=None, rows=None):
    """Mock CursorResult for one execute() call."""
    res = MagicMock()
    res.scalar.return_value = scalar
    res.mappings.return_value.first.return_value = first
    res.mappings.return_value.all.return_value = rows or []
    return res


TODO_ROW = {"id": 7, "task": "Write tests", "completed": False, "created_at": datetime(2024, 5, 7, 9, 30)}


@pytest.fixture
def pg_app(mock_engine):
    return TodoApp(mock_engine, DbType.POSTGRESQL)


@pytest.fixture
def mysql_app(mock_engine):
    return TodoApp(mock_engine, DbType.MYSQL)


@pytest.mark.unit
class TestValidateTodoId:

    @pytest.mark.parametrize("raw,expected", [("3", 3), ("42", 42)])
    def test_valid(self, pg_app, raw, expected):
        assert pg_app.validate_todo_id(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "0", "-1"])
    def test_invalid(self, pg_app, capsys, raw):
        assert pg_app.validate_todo_id(raw) is None
        assert "❌ Please provide a valid todo ID" in capsys.readouterr().out


@pytest.mark.unit
class TestSetup:

    def test_postgresql_ddl(self, pg_app, mock_engine, capsys):
        pg_app.setup_database()

        sql = executed_sql(mock_engine.conn)[0]
        assert "CREATE TABLE IF NOT EXISTS todos" in sql
        assert "SERIAL PRIMARY KEY" in sql
        mock_engine.conn.commit.assert_called_once()
        out = capsys.readouterr().out
        assert "🔧 Setting up database…" in out
        assert "✅ Database setup complete" in out

    def test_mysql_ddl(self, mysql_app, mock_engine):
        mysql_app.setup_database()
        assert "INT AUTO_INCREMENT PRIMARY KEY" in executed_sql(mock_engine.conn)[0]

    def test_unsupported_type(self, mock_engine):
        with pytest.raises(ValueError):
            TodoApp(mock_engine, "SQLite").setup_database()


@pytest.mark.unit
class TestAddTodo:

    def test_postgresql_returning(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.return_value = result(scalar=12)

        assert pg_app.add_todo("Buy milk") == 12

        statements = executed_sql(mock_engine.conn)
        assert len(statements) == 1
        assert "RETURNING id" in statements[0]
        assert mock_engine.conn.execute.call_args.args[1] == {"task": "Buy milk"}
        assert '📝 Added todo: "Buy milk" (ID: 12)' in capsys.readouterr().out

    def test_mysql_last_insert_id_same_connection(self, mysql_app, mock_engine):
        mock_engine.conn.execute.side_effect = [result(), result(scalar=5)]

        assert mysql_app.add_todo("Buy milk") == 5

        statements = executed_sql(mock_engine.conn)
        assert statements[0].startswith("INSERT INTO todos")
        assert "LAST_INSERT_ID()" in statements[1]
        mock_engine.connect.assert_called_once()


@pytest.mark.unit
class TestQueries:

    def test_list_todos(self, pg_app, mock_engine, capsys):
        done = dict(TODO_ROW, id=8, task="Ship it", completed=True)
        mock_engine.conn.execute.return_value = result(rows=[done, TODO_ROW])

        todos = pg_app.list_todos()

        assert [t.id for t in todos] == [8, 7]
        assert "ORDER BY created_at DESC" in executed_sql(mock_engine.conn)[0]
        out = capsys.readouterr().out
        assert "─" * 50 in out
        assert "✅ [8] Ship it (2024-05-07)" in out
        assert "⏳ [7] Write tests (2024-05-07)" in out

    def test_list_empty(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.return_value = result(rows=[])
        assert pg_app.list_todos() == []
        assert 'No todos found. Add some with: sql-todo add "Your task"' in capsys.readouterr().out

    def test_find_missing(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.return_value = result(first=None)
        assert pg_app.find_todo(99) is None
        assert "❌ Todo with ID 99 not found" in capsys.readouterr().out

    def test_toggle(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.side_effect = [result(first=TODO_ROW), result()]

        updated = pg_app.toggle_todo(7)

        assert updated.completed is True
        update_call = mock_engine.conn.execute.call_args_list[1]
        assert str(update_call.args[0]).startswith("UPDATE todos SET completed")
        assert update_call.args[1] == {"completed": True, "id": 7}
        assert '✅ Marked todo 7 as completed: "Write tests"' in capsys.readouterr().out

    def test_toggle_back_to_pending(self, pg_app, mock_engine, capsys):
        row = dict(TODO_ROW, completed=1)
        mock_engine.conn.execute.side_effect = [result(first=row), result()]

        assert pg_app.toggle_todo(7).completed is False
        assert '⏳ Marked todo 7 as pending: "Write tests"' in capsys.readouterr().out

    def test_toggle_missing(self, pg_app, mock_engine):
        mock_engine.conn.execute.return_value = result(first=None)
        assert pg_app.toggle_todo(99) is None
        assert len(executed_sql(mock_engine.conn)) == 1

    def test_delete(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.side_effect = [result(first=TODO_ROW), result()]

        assert pg_app.delete_todo(7) is True
        assert executed_sql(mock_engine.conn)[1] == "DELETE FROM todos WHERE id = :id"
        assert "🗑️ Deleted todo 7" in capsys.readouterr().out

    def test_stats(self, pg_app, mock_engine, capsys):
        mock_engine.conn.execute.side_effect = [result(scalar=5), result(scalar=2), result(scalar=3)]

        stats = pg_app.show_stats()

        assert (stats.total, stats.completed, stats.pending) == (5, 2, 3)
        out = capsys.readouterr().out
        assert "Total tasks: 5" in out
        assert "Completed: 2" in out
        assert "Pending: 3" in out


@pytest.mark.unit
class TestDispatch:

    @pytest.fixture
    def app(self):
        app = MagicMock(spec=TodoApp)
        app.validate_todo_id.side_effect = lambda raw: TodoApp.validate_todo_id(app, raw)
        return app

    def test_setup_runs_first(self, app):
        dispatch(app, "stats", [])
        assert app.method_calls[0][0] == "setup_database"
        app.show_stats.assert_called_once()

    def test_default_is_list(self, app):
        dispatch(app, None, [])
        app.list_todos.assert_called_once()

    def test_add_joins_words(self, app):
        dispatch(app, "add", ["Buy", "oat", "milk"])
        app.add_todo.assert_called_once_with("Buy oat milk")

    def test_add_without_task(self, app, capsys):
        dispatch(app, "add", [])
        app.add_todo.assert_not_called()
        assert "❌ Please provide a task description" in capsys.readouterr().out

    def test_toggle_and_delete_parse_id(self, app):
        dispatch(app, "toggle", ["3"])
        dispatch(app, "delete", ["4"])
        app.toggle_todo.assert_called_once_with(3)
        app.delete_todo.assert_called_once_with(4)

    def test_invalid_id_skips_command(self, app):
        dispatch(app, "delete", ["nope"])
        app.delete_todo.assert_not_called()

    @pytest.mark.parametrize("command", ["help", "frobnicate"])
    def test_help(self, app, command):
        dispatch(app, command, [])
        app.show_help.assert_called_once()


@pytest.mark.unit
class TestMain:

    def test_database_error_exits_and_disposes(self, clean_env, mock_engine, capsys):
        clean_env.setenv("POSTGRESQL_ADDON_URI", "postgresql://u:p@h/db")
        mock_engine.conn.execute.side_effect = ProgrammingError("CREATE TABLE", {}, Exception("permission denied"))

        with patch("addons.sql_connect.create_engine", return_value=mock_engine):
            with pytest.raises(SystemExit) as exc_info:
                sql_todo.main(["list"])

        assert exc_info.value.code == 1
        mock_engine.dispose.assert_called_once()
        assert "❌ Error:" in capsys.readouterr().err

    def test_add_end_to_end(self, clean_env, mock_engine, capsys):
        clean_env.setenv("MYSQL_ADDON_URI", "mysql://u:p@h/db")
        mock_engine.conn.execute.side_effect = [result(), result(), result(scalar=1)]

        with patch("addons.sql_connect.create_engine", return_value=mock_engine):
            sql_todo.main(["add", "First", "task"])

        mock_engine.dispose.assert_called_once()
        assert '📝 Added todo: "First task" (ID: 1)' in capsys.readouterr().out

    def test_verbose_flag_between_words(self, clean_env, mock_engine, capsys):
        clean_env.setenv("MYSQL_ADDON_URI", "mysql://u:p@h/db")
        mock_engine.conn.execute.side_effect = [result(), result(), result(scalar=2)]

        with patch("addons.sql_connect.create_engine", return_value=mock_engine):
            sql_todo.main(["add", "-v", "Buy", "milk"])

        assert '📝 Added todo: "Buy milk" (ID: 2)' in capsys.readouterr().out

    @pytest.mark.parametrize("uri", [
        "mysql+nosuchdriver://u:p@h/db",
        "postgresql://u:p@h:notaport/db",
    ])
    def test_bad_uri_reports_error(self, clean_env, capsys, uri):
        clean_env.setenv("MYSQL_ADDON_URI" if uri.startswith("mysql") else "POSTGRESQL_ADDON_URI", uri)

        with pytest.raises(SystemExit) as exc_info:
            sql_todo.main(["list"])

        assert exc_info.value.code == 1
        assert "❌" in capsys.readouterr().err

    def test_todo_model_coerces_mysql_booleans(self):
        assert Todo(id=1, task="t", completed=1).completed is True
        assert Todo(id=1, task="t", completed=0).status_icon == "⏳"
