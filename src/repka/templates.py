"""Templates for workspace initialization."""

REPKA_YAML_TEMPLATE = """# repka workspace configuration
name: {name}

env:
  FORCE_COLOR: "1"

tasks:
{tasks}

command_defaults:
  policy: pipeline
"""

INSTALL_TASK_TEMPLATE = """  install:
    description: Install dependencies
    run: {package_manager} install
    stdio: inherit"""

SCRIPT_TASK_TEMPLATE = """  {name}:
    description: {description}
    run: {package_manager} run {name}
    depends_on: [install]"""

# package.json scripts picked up as starter tasks, in this order
STARTER_SCRIPTS = {
    "build": "Build the workspace",
    "lint": "Run linting",
    "test": "Run tests",
}
