"""
User Service
Login, current-user profile, employee management and alert settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from pharmacy_inventory.data.users import AlertSettings, Employee, UserProfile
from pharmacy_inventory.logger import get_logger
from pharmacy_inventory.services import events
from pharmacy_inventory.services.api_client import ApiClient, BackendError

logger = get_logger("pharmacy_inventory.services.users")


@dataclass(frozen=True)
class NewEmployee:
    name: str
    login: str
    password: str

    @classmethod
    def parse(cls, form: Mapping[str, Any]) -> tuple[Optional["NewEmployee"], list[str]]:
        name = (form.get("name") or "").strip()
        login = (form.get("login") or "").strip()
        password = form.get("password") or ""
        errors = []
        if not name:
            errors.append("Name is required")
        if not login:
            errors.append("Login is required")
        if not password:
            errors.append("Password is required")
        if errors:
            return None, errors
        return cls(name, login, password), []


class UserService:

    def __init__(self, api: ApiClient):
        self.api = api

    def login(self, login: str, password: str) -> str:
        """Exchange credentials for a bearer token; the backend answers with the raw token."""
        body = self.api.post("/auth/login", {"login": login, "senha": password})
        if isinstance(body, Mapping):
            body = body.get("token")
        if not body or not isinstance(body, str):
            raise BackendError(502, "Login response did not contain a token")
        return body.strip()

    def me(self) -> UserProfile:
        return UserProfile.from_json(self.api.get("/auth/me") or {})

    def update_profile(self, name: str, login: str) -> None:
        self.api.put("/usuarios/perfil", {"nome": name, "login": login})
        logger.info(f"Profile updated for {login}")
        events.publish(events.USERS)

    def change_password(self, current_password: str, new_password: str) -> None:
        self.api.put("/usuarios/perfil/alterar-senha",
                     {"senhaAtual": current_password, "novaSenha": new_password})
        logger.info("Password changed for current user")

    def list_employees(self) -> List[Employee]:
        return [Employee.from_json(r) for r in (self.api.get("/funcionarios") or [])]

    def create_employee(self, employee: NewEmployee, admin_password: str) -> None:
        self.api.post("/funcionarios", {
            "nome": employee.name,
            "login": employee.login,
            "senha": employee.password,
            "senhaAdminConfirmacao": admin_password,
        })
        logger.info(f"Created employee {employee.login}")
        events.publish(events.USERS)

    def get_alert_settings(self) -> AlertSettings:
        return AlertSettings.from_json(self.api.get("/configuracoes"))

    def save_alert_settings(self, settings: AlertSettings) -> None:
        self.api.put("/configuracoes", settings.to_json())
        logger.info(f"Alert settings saved: {settings}")
        events.publish(events.SETTINGS)
