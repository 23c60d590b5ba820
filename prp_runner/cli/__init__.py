"""CLI commands for prp-runner.

Each command maps to one step of the PRP workflow so a CI job can run the
steps individually, or all at once with ``implement``.

Key Commands:
    resolve (prp_runner.cli.resolve):
        Extract the PRP reference from a comment, create the branch,
        archive the file and write the agent prompt.

    implement, commit, push, create-pr, comment (prp_runner.cli.implement):
        The full pipeline and its individual git and GitHub steps.

    check-bot-status (prp_runner.cli.discussion):
        Decide whether to answer a PRP-creation request and write the
        discussion prompt.

    preflight, select-runner (prp_runner.cli.preflight):
        Credential checks and CI runner selection.

Usage Examples:
    Resolve a comment inside a workflow::

        $ prp resolve --issue 123 --comment-body "Please implement PRPs/x.md"

    Run everything::

        $ prp implement --issue 123 --comment-body "$COMMENT_BODY"
"""
