"""
aic2

AI-generated commit messages and code reviews from staged git changes,
backed by interchangeable LLM providers.
"""

__version__ = "2.0.0"

# Request modes
COMMIT = "commit"
REVIEW = "review"
REQUEST_TYPES = (COMMIT, REVIEW)

# Conventional commit types - used by the prompt builder and the CLI
COMMIT_TYPES = {
    'feat': 'A new feature or capability',
    'fix': 'A bug fix',
    'refactor': 'Code restructuring without behavior change',
    'chore': 'Maintenance tasks, dependencies, tooling',
    'docs': 'Documentation only changes',
    'test': 'Adding or updating tests',
    'style': 'Formatting, whitespace, no code change',
    'perf': 'Performance improvement',
    'ci': 'CI/CD configuration changes',
    'build': 'Build system or external dependency changes',
}

GITMOJIS = {
    ':sparkles:': 'Introduce new features',
    ':bug:': 'Fix a bug',
    ':recycle:': 'Refactor code',
    ':wrench:': 'Add or update configuration files',
    ':memo:': 'Add or update documentation',
    ':white_check_mark:': 'Add, update, or pass tests',
    ':art:': 'Improve structure / format of the code',
    ':zap:': 'Improve performance',
    ':construction_worker:': 'Add or update CI build system',
    ':arrow_up:': 'Upgrade dependencies',
    ':fire:': 'Remove code or files',
}

# Commit message conventions accepted by --type and the rc file
COMMIT_CONVENTIONS = ("", "conventional", "gitmoji")
