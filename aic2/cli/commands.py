"""CLI Commands"""

import os
import sys

from aic2.config import API_KEY_ENV, load_config, get_config_path
from aic2.output import bold, dim, info


def _mask(key: str) -> str:
    if not key:
        return "not set"
    return f"{key[:4]}...{key[-2:]}" if len(key) > 8 else "****"


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .aic2rc found)")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:      {info(config.provider or 'not set')}")
    print(f"    locale:        {info(config.locale)}")
    print(f"    type:          {info(config.type or 'free form')}")
    print(f"    generate:      {info(str(config.generate))}")
    print(f"    max_length:    {info(str(config.max_length))}")
    print(f"    include_body:  {info(str(config.include_body).lower())}")
    print(f"    logging:       {info(str(config.logging).lower())} {dim(f'({config.logs_dir})')}")
    print(f"    timeout:       {info(f'{config.timeout:g}s')}")

    if config.providers:
        print(f"\n  {bold('Providers:')}")
        for name in sorted(config.providers):
            provider = config.provider_config(name)
            model = provider.model or 'default model'
            print(f"    {name:<12} {info(model)}  {dim('key:')} {_mask(provider.key)}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .aic2rc (in current directory)")
    print(f"    Global: ~/.aic2rc")
    print(f"  {dim('API keys can also come from:')} {', '.join(sorted(API_KEY_ENV.values()))}\n")

    return 0


def run_install_completion() -> int:
    """Show how to install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print('  eval "$(register-python-argcomplete aic2)"\n')
        print(f"Then run: {dim(f'source {rc_file}')}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell aic2 | Out-String | Invoke-Expression")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete aic2)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish aic2 | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
