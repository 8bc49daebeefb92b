import os
import pwd
import tempfile
import unittest
import unittest.mock
from pathlib import Path

from hostsetup import files

CURRENT_USER = pwd.getpwuid(os.getuid()).pw_name


class TestEnsureFile(unittest.TestCase):
    def test_creates_and_skips_identical_content(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "sub" / "motd"
            self.assertTrue(files.ensure_file(path, "hello\n"))
            self.assertEqual(path.read_text(), "hello\n")
            self.assertFalse(files.ensure_file(path, "hello\n"))

    def test_replacement_keeps_mode(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "conf"
            path.write_text("old\n")
            path.chmod(0o640)

            self.assertTrue(files.ensure_file(path, "new\n", backup=False))

            self.assertEqual(path.read_text(), "new\n")
            self.assertEqual(path.stat().st_mode & 0o777, 0o640)
            self.assertEqual(list(Path(td).glob("*.bak")), [])

    def test_new_file_is_world_readable(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "motd"
            files.ensure_file(path, "hello\n")
            self.assertEqual(path.stat().st_mode & 0o777, 0o644)

    def test_explicit_mode_is_applied(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "conf"
            path.write_text("old\n")
            path.chmod(0o600)
            files.ensure_file(path, "new\n", mode=0o644, backup=False)
            self.assertEqual(path.stat().st_mode & 0o777, 0o644)


class TestAppend(unittest.TestCase):
    def test_append_file_creates_then_extends(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "bashrc.append"
            dest = Path(td) / ".bashrc"
            src.write_text("alias ll='ls -l'\n")

            files.append_file(src, dest)
            files.append_file(src, dest, owner=CURRENT_USER, group=files.primary_group(CURRENT_USER))

            self.assertEqual(dest.read_text(), "alias ll='ls -l'\n" * 2)

    def test_append_file_copies_bytes_verbatim(self):
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "nanorc.append"
            dest = Path(td) / ".nanorc"
            src.write_bytes(b"# caf\xe9\n")
            files.append_file(src, dest)
            self.assertEqual(dest.read_bytes(), b"# caf\xe9\n")

    def test_append_text_keeps_existing_content(self):
        with tempfile.TemporaryDirectory() as td:
            dest = Path(td) / "authorized_keys"
            dest.write_text("ssh-rsa OLD\n")
            files.append_text(dest, "ssh-ed25519 NEW\n")
            self.assertEqual(dest.read_text(), "ssh-rsa OLD\nssh-ed25519 NEW\n")


class TestPermissions(unittest.TestCase):
    def test_set_permissions_changes_mode_only_when_needed(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "f"
            path.write_text("")
            path.chmod(0o644)
            self.assertTrue(files.set_permissions(path, mode=0o600))
            self.assertFalse(files.set_permissions(path, mode=0o600))
            self.assertEqual(path.stat().st_mode & 0o777, 0o600)

    def test_set_permissions_same_owner_is_noop(self):
        with tempfile.TemporaryDirectory() as td:
            with unittest.mock.patch("hostsetup.files.shutil.chown") as chown:
                self.assertFalse(files.set_permissions(td, owner=CURRENT_USER))
            chown.assert_not_called()

    def test_recursive_ownership_uses_chown(self):
        with tempfile.TemporaryDirectory() as td:
            with unittest.mock.patch("hostsetup.files.subprocess.run") as run:
                self.assertTrue(files.set_permissions_recursive(td, owner="alice", group="alice"))
            run.assert_called_once_with(["chown", "-R", "alice:alice", td], check=True)

    def test_recursive_ownership_missing_path(self):
        with unittest.mock.patch("hostsetup.files.subprocess.run") as run:
            self.assertFalse(files.set_permissions_recursive("/nonexistent/path", owner="alice"))
        run.assert_not_called()

    def test_ensure_dir_creates_with_mode(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / ".ssh"
            self.assertTrue(files.ensure_dir(path, mode=0o700))
            self.assertTrue(path.is_dir())
            self.assertEqual(path.stat().st_mode & 0o777, 0o700)
            self.assertFalse(files.ensure_dir(path, mode=0o700))


class TestRenderTemplate(unittest.TestCase):
    def test_renders_variables(self):
        with tempfile.TemporaryDirectory() as td:
            template = Path(td) / "motd.txt.j2"
            template.write_text("Welcome to {{ hostname }}, {{ username }}\n")
            out = files.render_template(template, {"hostname": "box", "username": "alice"})
            self.assertEqual(out, "Welcome to box, alice\n")


if __name__ == "__main__":
    unittest.main()
