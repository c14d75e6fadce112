"""
Erros de domínio do MesaLink.

Os serviços levantam estas exceções; os handlers registrados em
`mesalink.main` convertem cada uma em uma resposta JSON `{"message": ...}`
com o status HTTP correspondente. O cliente (`mesalink.client.api`) faz o
caminho inverso e reconstrói a mesma exceção a partir da resposta.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Erro interno"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(AppError):
    status_code = 400
    default_message = "Solicitação inválida"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, errors=errors or [])

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self.extra["errors"]


class AuthError(AppError):
    status_code = 401
    default_message = "Não autenticado"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Acesso negado"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Recurso não encontrado"


class InvalidTransitionError(AppError):
    status_code = 400
    default_message = "Transição de status não permitida"

    def __init__(self, current_status: str, allowed_statuses: List[str], message: Optional[str] = None):
        super().__init__(message, currentStatus=current_status, allowedStatuses=list(allowed_statuses))

    @property
    def current_status(self) -> str:
        return self.extra["currentStatus"]

    @property
    def allowed_statuses(self) -> List[str]:
        return self.extra["allowedStatuses"]


class TransientInfraError(AppError):
    status_code = 500
    default_message = "Erro temporário de infraestrutura"


class ConnectivityError(TransientInfraError):
    """Falha de rede no cliente (sem resposta do servidor)."""

    default_message = "Sem conexão com o servidor"
