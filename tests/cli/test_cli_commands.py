"""Tests for the eduarch CLI commands."""

from typer.testing import CliRunner

from eduarch.cli.commands import app


runner = CliRunner()


class TestInitDb:
    """Tests for eduarch init-db."""

    def test_creates_database(self, tmp_path):
        db = tmp_path / "new" / "store.db"
        result = runner.invoke(app, ["init-db", "--db", str(db)])
        assert result.exit_code == 0
        assert "Database ready" in result.stdout
        assert db.exists()

    def test_idempotent(self, tmp_path):
        db = tmp_path / "store.db"
        runner.invoke(app, ["init-db", "--db", str(db)])
        result = runner.invoke(app, ["init-db", "--db", str(db)])
        assert result.exit_code == 0


class TestList:
    """Tests for eduarch list."""

    def test_empty_collection(self, store, db_path):
        result = runner.invoke(app, ["list", "courses", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "No courses found" in result.stdout

    def test_lists_records(self, db_path, teacher, student):
        result = runner.invoke(app, ["list", "users", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Ada Lovelace" in result.stdout
        assert "Alan Turing" in result.stdout

    def test_where_filter(self, db_path, teacher, student):
        result = runner.invoke(
            app, ["list", "users", "-w", "role=STUDENT", "--db", str(db_path)]
        )
        assert result.exit_code == 0
        assert "Alan Turing" in result.stdout
        assert "Ada Lovelace" not in result.stdout

    def test_unknown_filter_field(self, store, db_path):
        result = runner.invoke(
            app, ["list", "users", "--where", "age=3", "--db", str(db_path)]
        )
        assert result.exit_code == 1
        assert "unknown_filter" in result.stdout

    def test_malformed_filter(self, store, db_path):
        result = runner.invoke(app, ["list", "users", "-w", "role", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "expected field=value" in result.stdout

    def test_unknown_collection(self, store, db_path):
        result = runner.invoke(app, ["list", "teachers", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "Unknown collection" in result.stdout


class TestShow:
    """Tests for eduarch show."""

    def test_show_record(self, db_path, course):
        result = runner.invoke(app, ["show", "courses", course.id, "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Analytical Engines" in result.stdout
        assert "DRAFT" in result.stdout

    def test_show_missing(self, store, db_path):
        result = runner.invoke(app, ["show", "courses", "crs_missing", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestDelete:
    """Tests for eduarch delete."""

    def test_restricted_delete(self, store, db_path, course, module):
        result = runner.invoke(app, ["delete", "courses", course.id, "--db", str(db_path)])
        assert result.exit_code == 1
        assert "--cascade" in result.stdout
        assert store.courses.exists(course.id)

    def test_cascade_delete(self, store, db_path, course, module):
        result = runner.invoke(
            app, ["delete", "courses", course.id, "--cascade", "--db", str(db_path)]
        )
        assert result.exit_code == 0
        assert "Deleted" in result.stdout
        assert not store.courses.exists(course.id)
        assert store.modules.list() == []

    def test_delete_missing(self, store, db_path):
        result = runner.invoke(app, ["delete", "users", "usr_missing", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestConfig:
    """Tests for eduarch config."""

    def test_shows_delete_policy(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "store.delete_policy" in result.stdout
        assert "restrict" in result.stdout
