"""Registry inspection command classes."""

import json

import yaml

from cli.core.base import BaseCommand
from cli.core.utils import EXIT_ERROR, EXIT_NOT_FOUND, EXIT_SUCCESS
from cli.registry.display import display_feature_table, display_navigation
from valhalla.exceptions import RegistryError
from valhalla.security.features import FEATURE_ROUTES, validate_registry
from valhalla.security.navigation import resolve_navigation
from valhalla.security.roles import Role


def feature_matrix(features, roles):
    """Registry as plain data: {feature_key: {role_id: permission flags}}."""
    return {
        feature.key: {
            'path': feature.app_path,
            'permissions': {
                role_id: feature.permissions_for(role_id).as_snake_dict() for role_id in roles
            },
        }
        for feature in features
    }


class FeatureTableCommand(BaseCommand):
    """Show the permission table of the feature registry."""

    def execute(self, roles=None, output_format='table') -> int:
        try:
            if output_format == 'table':
                display_feature_table(self.ctx, FEATURE_ROUTES, roles)
                return EXIT_SUCCESS

            data = feature_matrix(FEATURE_ROUTES, roles or [int(role) for role in Role])
            if output_format == 'json':
                self.console.print_json(json.dumps(data))
            else:
                self.console.print(yaml.safe_dump(data, sort_keys=False), end='')
            return EXIT_SUCCESS
        except Exception as e:
            return self.handle_exception(e)


class NavigationCommand(BaseCommand):
    """Show what one role sees."""

    def execute(self, role_id=None) -> int:
        navigation = resolve_navigation(role_id)
        display_navigation(self.ctx, navigation)
        if not navigation.accessible_features:
            self.console.print("❌ This role can not view any feature", style="bold red")
            return EXIT_NOT_FOUND
        return EXIT_SUCCESS


class RegistryCheckCommand(BaseCommand):
    """Validate the registry, treating warnings as errors."""

    def execute(self) -> int:
        try:
            validate_registry(FEATURE_ROUTES, strict=True)
        except RegistryError as e:
            self.ctx.stderr_console.print(f"❌ {e}", style="bold red")
            return EXIT_ERROR
        self.console.print(f"✅ {len(FEATURE_ROUTES)} features, registry is consistent",
                           style="green bold")
        return EXIT_SUCCESS
