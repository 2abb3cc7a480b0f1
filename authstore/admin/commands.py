"""Administration commands for a configured security model.

Each command receives the security model and the parsed arguments, prints
its result and returns the process exit code.
"""

import argparse
import getpass
from typing import Callable, Dict

from ..model.base import SecurityModel
from ..model.exceptions import SecurityError

CommandHandler = Callable[[SecurityModel, argparse.Namespace], int]


class CommandError(SecurityError):
    """Raised when a command cannot be completed."""


def _get_user(model: SecurityModel, username: str):
    user = model.get_user_by_username(username)
    if user is None:
        raise CommandError(f"Unknown user: {username}")
    return user


def _get_role(model: SecurityModel, name: str):
    role = model.get_role_by_name(name)
    if role is None:
        raise CommandError(f"Unknown role: {name}")
    return role


def cmd_ping(model: SecurityModel, args: argparse.Namespace) -> int:
    if model.ping():
        print("ok")
        return 0

    print("unavailable")
    return 1


def cmd_users(model: SecurityModel, args: argparse.Namespace) -> int:
    for user in model.get_users(query=args.query, page=args.page, limit=args.limit):
        flags = []
        if user.is_super_user:
            flags.append("super")
        if not user.is_active:
            flags.append("inactive")

        roles = ", ".join(role.name or str(role.id) for role in user.roles)
        line = f"{user.id}\t{user.username}\t{user.email or '-'}\t{roles or '-'}"
        if flags:
            line += f"\t[{', '.join(flags)}]"
        print(line)

    print(f"{model.count_users(query=args.query)} user(s)")
    return 0


def cmd_add_user(model: SecurityModel, args: argparse.Namespace) -> int:
    password = args.password
    if password is None:
        password = getpass.getpass(f"Password for {args.username}: ")

    user = model.create_user()
    user.username = args.username
    user.password = password
    user.is_active = not args.inactive
    user.is_super_user = args.super
    if args.email:
        user.email = args.email
    if args.name:
        user.display_name = args.name

    model.save_user(user)
    print(f"Created user {user.username} with id {user.id}")
    return 0


def cmd_delete_user(model: SecurityModel, args: argparse.Namespace) -> int:
    user = _get_user(model, args.username)
    model.delete_user(user)
    print(f"Deleted user {args.username}")
    return 0


def cmd_assign(model: SecurityModel, args: argparse.Namespace) -> int:
    user = _get_user(model, args.username)
    roles = [_get_role(model, name) for name in args.roles]

    model.set_roles_to_user(user, roles)
    print(f"Roles of {user.username}: {', '.join(role.name for role in roles) or '-'}")
    return 0


def cmd_roles(model: SecurityModel, args: argparse.Namespace) -> int:
    for role in model.get_roles(query=args.query):
        codes = ", ".join(permission.code for permission in role.permissions)
        print(f"{role.id}\t{role.name}\tweight={role.weight}\t{codes or '-'}")

    print(f"{model.count_roles(query=args.query)} role(s)")
    return 0


def cmd_add_role(model: SecurityModel, args: argparse.Namespace) -> int:
    if model.get_role_by_name(args.name) is not None:
        raise CommandError(f"Role already exists: {args.name}")

    role = model.create_role()
    role.name = args.name
    role.weight = args.weight

    model.save_role(role)
    print(f"Created role {role.name} with id {role.id}")
    return 0


def cmd_delete_role(model: SecurityModel, args: argparse.Namespace) -> int:
    role = _get_role(model, args.name)
    model.delete_role(role)
    print(f"Deleted role {args.name}")
    return 0


def cmd_grant(model: SecurityModel, args: argparse.Namespace) -> int:
    role = _get_role(model, args.role)

    unknown = [code for code in args.codes if not model.has_permission(code)]
    if unknown:
        raise CommandError(f"Unknown permission(s): {', '.join(unknown)}")

    model.set_granted_permissions_to_role(role, args.codes)
    print(f"Permissions of {role.name}: {', '.join(args.codes) or '-'}")
    return 0


def cmd_allow(model: SecurityModel, args: argparse.Namespace) -> int:
    role = _get_role(model, args.role)

    model.set_allowed_paths_to_role(role, args.paths)
    print(f"Paths of {role.name}: {', '.join(args.paths) or '-'}")
    return 0


def cmd_permissions(model: SecurityModel, args: argparse.Namespace) -> int:
    for permission in model.get_permissions():
        print(f"{permission.code}\t{permission.description}")
    return 0


def cmd_add_permission(model: SecurityModel, args: argparse.Namespace) -> int:
    model.add_permission(args.code, args.description)
    print(f"Registered permission {args.code}")
    return 0


def cmd_delete_permission(model: SecurityModel, args: argparse.Namespace) -> int:
    if not model.has_permission(args.code):
        raise CommandError(f"Unknown permission: {args.code}")

    model.delete_permission(args.code)
    print(f"Unregistered permission {args.code}")
    return 0


def cmd_secured_paths(model: SecurityModel, args: argparse.Namespace) -> int:
    if args.paths:
        model.set_secured_paths(args.paths)

    for path in model.get_secured_paths():
        print(path)
    return 0


COMMANDS: Dict[str, CommandHandler] = {
    "ping": cmd_ping,
    "users": cmd_users,
    "add-user": cmd_add_user,
    "delete-user": cmd_delete_user,
    "assign": cmd_assign,
    "roles": cmd_roles,
    "add-role": cmd_add_role,
    "delete-role": cmd_delete_role,
    "grant": cmd_grant,
    "allow": cmd_allow,
    "permissions": cmd_permissions,
    "add-permission": cmd_add_permission,
    "delete-permission": cmd_delete_permission,
    "secured-paths": cmd_secured_paths,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser of the administration CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m authstore.admin",
        description="Manage the users, roles and permissions of an authstore security model.",
    )
    parser.add_argument(
        "-c", "--config",
        default="/etc/authstore/config.yaml",
        help="Path to the YAML configuration file",
    )
    parser.add_argument("--store", help="Store file, overrides the configured path")
    parser.add_argument("--log-level", help="Log level, overrides the configured level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("ping", help="Check that the store can be used")

    users = subparsers.add_parser("users", help="List users")
    users.add_argument("--query", help="Filter on username, display name or email")
    users.add_argument("--page", type=int)
    users.add_argument("--limit", type=int)

    add_user = subparsers.add_parser("add-user", help="Create a user")
    add_user.add_argument("username")
    add_user.add_argument("--password", help="Password, prompted when omitted")
    add_user.add_argument("--email")
    add_user.add_argument("--name", help="Display name")
    add_user.add_argument("--super", action="store_true", help="Make the user a super user")
    add_user.add_argument("--inactive", action="store_true", help="Create the user disabled")

    delete_user = subparsers.add_parser("delete-user", help="Delete a user")
    delete_user.add_argument("username")

    assign = subparsers.add_parser("assign", help="Set the roles of a user")
    assign.add_argument("username")
    assign.add_argument("roles", nargs="*")

    roles = subparsers.add_parser("roles", help="List roles")
    roles.add_argument("--query", help="Filter on role name")

    add_role = subparsers.add_parser("add-role", help="Create a role")
    add_role.add_argument("name")
    add_role.add_argument("--weight", type=int, default=0)

    delete_role = subparsers.add_parser("delete-role", help="Delete a role")
    delete_role.add_argument("name")

    grant = subparsers.add_parser("grant", help="Set the granted permissions of a role")
    grant.add_argument("role")
    grant.add_argument("codes", nargs="*")

    allow = subparsers.add_parser("allow", help="Set the allowed paths of a role")
    allow.add_argument("role")
    allow.add_argument("paths", nargs="*")

    subparsers.add_parser("permissions", help="List permissions")

    add_permission = subparsers.add_parser("add-permission", help="Register a permission")
    add_permission.add_argument("code")
    add_permission.add_argument("--description")

    delete_permission = subparsers.add_parser("delete-permission", help="Unregister a permission")
    delete_permission.add_argument("code")

    secured_paths = subparsers.add_parser(
        "secured-paths", help="Show the secured paths, or replace them when paths are given"
    )
    secured_paths.add_argument("paths", nargs="*")

    return parser


def run_command(model: SecurityModel, args: argparse.Namespace) -> int:
    return COMMANDS[args.command](model, args)
