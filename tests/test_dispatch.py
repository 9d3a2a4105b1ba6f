"""Tests for subcommand routing."""

from __future__ import annotations

import subprocess
import unittest
from unittest import mock

from git_object_cache import commands, dispatch

from sandbox import GitSandbox


class LookupTests(unittest.TestCase):
    def test_recognized_names(self) -> None:
        self.assertIs(dispatch.lookup("clone"), commands.clone)
        self.assertIs(dispatch.lookup("fetch"), commands.fetch)
        self.assertIs(dispatch.lookup("pull"), commands.pull)
        self.assertIs(dispatch.lookup("cache"), commands.cache)
        self.assertIs(dispatch.lookup("cache-attach"), commands.cache_attach)
        self.assertIs(dispatch.lookup("cache-detach"), commands.cache_detach)
        self.assertIs(dispatch.lookup("cache-repair"), commands.cache_repair)

    def test_unrecognized_names(self) -> None:
        for name in ("status", "log", "push", "cache-", "Clone", ""):
            with self.subTest(name=name):
                self.assertIsNone(dispatch.lookup(name))


class DispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sandbox = GitSandbox()
        self.sandbox.__enter__()
        self.addCleanup(self.sandbox.__exit__, None, None, None)
        self.sandbox.make_upstream("group/proj")
        self.wc = self.sandbox.plain_clone("group/proj", "proj")

    def test_routes_recognized_command_with_remaining_arguments(self) -> None:
        handler = mock.Mock(return_value=3)
        state = self.sandbox.state(self.wc)

        with mock.patch.dict(dispatch.HANDLERS, {"cache_attach": handler}):
            status = dispatch.dispatch(state, ["cache-attach", "upstream"])

        self.assertEqual(status, 3)
        handler.assert_called_once_with(state, ["upstream"])

    def test_passthrough_keeps_arguments_verbatim(self) -> None:
        argv = ["log", "--oneline", "-n", "1", "--", "README"]

        with mock.patch("git_object_cache.git.run_git_passthrough", return_value=0) as passthrough:
            status = dispatch.dispatch(self.sandbox.state(self.wc), argv)

        self.assertEqual(status, 0)
        passthrough.assert_called_once_with(argv, cwd=self.wc)

    def test_passthrough_matches_direct_git(self) -> None:
        for argv in (["rev-parse", "--is-inside-work-tree"], ["no-such-subcommand-xyz"], ["status", "--porcelain"]):
            with self.subTest(argv=argv):
                direct = subprocess.run(["git", *argv], cwd=self.wc, capture_output=True).returncode
                status = dispatch.dispatch(self.sandbox.state(self.wc), argv)
                self.assertEqual(status, direct)

    def test_empty_command_line_goes_to_git(self) -> None:
        with mock.patch("git_object_cache.git.run_git_passthrough", return_value=1) as passthrough:
            status = dispatch.dispatch(self.sandbox.state(self.wc), [])

        self.assertEqual(status, 1)
        passthrough.assert_called_once_with([], cwd=self.wc)


if __name__ == "__main__":
    unittest.main()
