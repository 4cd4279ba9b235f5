#!/usr/bin/env python3
"""Filediff agent: report build output size changes on a pull request.

Measures the globbed file set on the target branch and on the pull request
branch in parallel, renders a size report, and posts it as a PR comment
(replacing earlier reports unless told otherwise). Nothing is posted when the
total uncompressed size is the same on both branches.
"""

import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from configs.config import Config, ConfigError, get_bool_input, get_input, parse_bool, require_token  # noqa: E402
from clients.github_client import GithubClient  # noqa: E402
from utils.branch_stats import compute_branch_stats  # noqa: E402
from utils.byte_format import pretty_bytes  # noqa: E402
from utils.diff_report import classify_changes, render_report  # noqa: E402
from utils.errors import FileDiffError  # noqa: E402
from utils.pr_commenter import PRCommenter  # noqa: E402
from utils.pr_models import PullRequestRef, load_event_payload, pull_request_from_payload  # noqa: E402
from utils.stats_models import ActionInputs, BranchStats  # noqa: E402

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class RunResult:
	"""Outcome of one run."""
	posted: bool
	body: Optional[str] = None
	comment_id: Optional[int] = None
	target_stats: Optional[BranchStats] = None
	subject_stats: Optional[BranchStats] = None


class FileDiffAgent:
	"""Drives both branch measurements and publishes the report."""

	def __init__(
		self,
		token: Optional[str],
		client=None,
		commenter: Optional[PRCommenter] = None,
		*,
		source_dir: str = ".",
		workspace_root: Optional[str] = None,
		max_workers: Optional[int] = None,
		dry_run: bool = False,
		stats_fn: Callable[..., BranchStats] = compute_branch_stats,
	):
		"""Initialize the agent.

		Args:
			token: GitHub token; required unless dry_run is set
			client: Optional GitHub client. If None, one is built from the token.
			commenter: Optional PRCommenter wrapping the client
			source_dir: Checkout copied into each branch workspace
			workspace_root: Parent directory of the branch workspaces
			max_workers: Thread pool size for per-file measurement
			dry_run: Render the report without touching the pull request
			stats_fn: Branch snapshot function, replaceable in tests

		Raises:
			ConfigError: If the token is missing and dry_run is not set
		"""
		self.dry_run = dry_run
		self.token = None if dry_run and not token else require_token(token)
		self.source_dir = source_dir
		self.workspace_root = workspace_root
		self.max_workers = max_workers
		self._stats_fn = stats_fn

		if commenter is not None:
			self.commenter = commenter
		elif dry_run:
			self.commenter = None
		else:
			self.commenter = PRCommenter(client or GithubClient(token=self.token))
		logger.debug("Filediff agent initialized")

	def _branch_stats(self, branch: str, inputs: ActionInputs) -> BranchStats:
		return self._stats_fn(
			branch,
			inputs.dir_glob,
			inputs.pre_diff_script,
			source_dir=self.source_dir,
			workspace_root=self.workspace_root,
			max_workers=self.max_workers,
		)

	def compute_stats(self, inputs: ActionInputs, head_ref: str) -> Tuple[BranchStats, BranchStats]:
		"""Measure target and pull request branches concurrently.

		Returns:
			(target_stats, subject_stats)
		"""
		if head_ref == inputs.target_branch:
			raise ConfigError(f"Pull request branch and target branch are both '{head_ref}'")
		with ThreadPoolExecutor(max_workers=2) as pool:
			target_future = pool.submit(self._branch_stats, inputs.target_branch, inputs)
			subject_future = pool.submit(self._branch_stats, head_ref, inputs)
			# Both are awaited; the first failure propagates
			return target_future.result(), subject_future.result()

	def run(self, inputs: ActionInputs, pr: PullRequestRef) -> RunResult:
		"""Compute, compare and publish.

		Returns:
			RunResult with posted=False when total sizes are identical
		"""
		logger.info("Creating filediff comment")
		target_stats, subject_stats = self.compute_stats(inputs, pr.head_ref)
		log_comparison(inputs.target_branch, target_stats, pr.head_ref, subject_stats)

		if target_stats.total_size == subject_stats.total_size:
			logger.info("No changes detected: Total sizes are identical between branches")
			logger.info("Action completed without posting a comment")
			return RunResult(posted=False, target_stats=target_stats, subject_stats=subject_stats)

		logger.info("Size difference detected, generating comment...")
		body = render_report(target_stats, subject_stats, inputs.file_details_open)

		if self.dry_run or self.commenter is None:
			logger.info("Dry run: comment not posted")
			return RunResult(posted=False, body=body, target_stats=target_stats, subject_stats=subject_stats)

		created = self.commenter.publish(pr, body, replace=inputs.replace_comment)
		comment_id = created.get("id") if isinstance(created, dict) else None
		return RunResult(
			posted=True,
			body=body,
			comment_id=int(comment_id) if comment_id is not None else None,
			target_stats=target_stats,
			subject_stats=subject_stats,
		)

	def close(self) -> None:
		client = getattr(self.commenter, "client", None)
		if client is not None and hasattr(client, "close"):
			client.close()


def _sample(paths: List[str]) -> str:
	n = Config.LOG_SAMPLE_SIZE
	return ", ".join(paths[:n]) + ("..." if len(paths) > n else "")


def log_comparison(target_branch: str, target: BranchStats, head_ref: str, subject: BranchStats) -> None:
	"""Log branch totals and a sample of added, removed and modified files."""
	logger.info("=" * 50)
	logger.info("Comparing branches:")
	logger.info(f"  Target: {target_branch}")
	logger.info(f"    - Total size: {pretty_bytes(target.total_size)}")
	logger.info(f"    - Files: {target.file_count}")
	logger.info(f"  PR Branch: {head_ref}")
	logger.info(f"    - Total size: {pretty_bytes(subject.total_size)}")
	logger.info(f"    - Files: {subject.file_count}")
	logger.info("=" * 50)

	by_status = {"added": [], "removed": [], "modified": []}
	for change in classify_changes(target, subject):
		if change.status in by_status:
			by_status[change.status].append(change.path)

	logger.info("File changes detected:")
	logger.info(f"  Added: {len(by_status['added'])}")
	logger.info(f"  Removed: {len(by_status['removed'])}")
	logger.info(f"  Modified: {len(by_status['modified'])}")
	for status, paths in by_status.items():
		if paths:
			logger.info(f"  Sample {status} files: {_sample(paths)}")


def build_inputs(args) -> ActionInputs:
	"""Merge command line flags over INPUT_* action variables."""
	target_branch = args.target_branch or get_input("target_branch", required=True)
	dir_glob = args.dir_glob or get_input("dir_glob", required=True)
	script = args.pre_diff_script if args.pre_diff_script is not None else get_input("pre_diff_script")
	if args.file_details_open is not None:
		details_open = parse_bool(args.file_details_open, "file_details_open", False)
	else:
		details_open = get_bool_input("file_details_open", False)
	if args.replace_comment is not None:
		replace = parse_bool(args.replace_comment, "replace_comment", True)
	else:
		replace = get_bool_input("replace_comment", True)
	return ActionInputs(
		target_branch=target_branch,
		dir_glob=dir_glob,
		pre_diff_script=script,
		file_details_open=details_open,
		replace_comment=replace,
	)


def resolve_pull_request(args) -> Optional[PullRequestRef]:
	"""Pull request from explicit flags, else from the workflow event payload."""
	if args.pr is not None:
		if not (args.owner and args.repo and args.head_ref):
			raise ConfigError("--pr requires --owner, --repo and --head-ref")
		return PullRequestRef(owner=args.owner, repo=args.repo, number=args.pr, head_ref=args.head_ref)
	payload = load_event_payload(args.event_path or os.getenv("GITHUB_EVENT_PATH"))
	return pull_request_from_payload(payload)


def _report_failure(message: str) -> None:
	print(f"Error: {message}", file=sys.stderr)
	if os.getenv("GITHUB_ACTIONS") == "true":
		# Workflow command: marks the step as failed with this message
		print(f"::error::{message}")


def main(argv: Optional[List[str]] = None) -> int:
	"""CLI entry point for the filediff agent."""
	import argparse

	parser = argparse.ArgumentParser(
		description="Filediff - report build output size changes between two branches on a PR",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Inputs fall back to the INPUT_* variables set by the Actions runner.

Examples:
  python -m agents.filediff_agent --target-branch main --dir-glob "dist/**/*.js"
  python -m agents.filediff_agent --target-branch main --dir-glob "dist/*.js,!dist/*.map" \\
      --pre-diff-script "npm ci && npm run build" --owner o --repo r --pr 1 --head-ref feature --dry-run
		"""
	)
	parser.add_argument("--target-branch", dest="target_branch", help="Branch to diff against")
	parser.add_argument("--dir-glob", dest="dir_glob", help="Comma-separated glob patterns")
	parser.add_argument("--pre-diff-script", dest="pre_diff_script", help="'&&'-joined build commands")
	parser.add_argument("--file-details-open", dest="file_details_open", help="true/false")
	parser.add_argument("--replace-comment", dest="replace_comment", help="true/false")
	parser.add_argument("--owner", help="Repository owner (overrides the event payload)")
	parser.add_argument("--repo", help="Repository name")
	parser.add_argument("--pr", type=int, help="Pull request number")
	parser.add_argument("--head-ref", dest="head_ref", help="Pull request branch")
	parser.add_argument("--event-path", dest="event_path", help="Event payload JSON (defaults to GITHUB_EVENT_PATH)")
	parser.add_argument("--workspace-root", dest="workspace_root", help="Parent directory for branch workspaces")
	parser.add_argument("--dry-run", action="store_true", help="Print the report instead of posting it")
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

	args = parser.parse_args(argv)

	# Set up logging
	log_level = logging.DEBUG if args.verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)
	if not args.verbose:
		logging.getLogger("clients.github_client").setLevel(logging.WARNING)
		logging.getLogger("urllib3").setLevel(logging.WARNING)

	agent = None
	try:
		# Credential first: nothing else runs without it
		agent = FileDiffAgent(
			os.getenv("GITHUB_TOKEN") or Config.GITHUB_TOKEN,
			workspace_root=args.workspace_root,
			dry_run=args.dry_run,
		)
		pr = resolve_pull_request(args)
		if pr is None:
			logger.info("Not a pull request event, nothing to compare")
			return 0
		inputs = build_inputs(args)

		result = agent.run(inputs, pr)
		if args.dry_run and result.body:
			print(result.body)
		return 0

	except FileDiffError as e:
		logger.error(f"Filediff failed ({e.code}): {e}")
		_report_failure(str(e))
		return 1
	except Exception as e:
		logger.exception("Unexpected error")
		_report_failure(str(e) or "An unexpected error occurred")
		return 1
	finally:
		if agent:
			agent.close()


if __name__ == "__main__":
	sys.exit(main())
