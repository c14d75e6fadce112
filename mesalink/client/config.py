from typing import List

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    # Endereço da API vista pelo dispositivo (tablet da mesa ou da cozinha)
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    REQUEST_TIMEOUT: float = 10.0

    # Intervalo de atualização do quadro da cozinha, em segundos
    POLL_INTERVAL: float = 12.0

    # Margem antes do vencimento em que o token em cache deixa de ser usado
    SESSION_BUFFER_MS: int = 60 * 1000

    # Mesas tipo quiosque, separadas por vírgula
    PERSISTENT_TABLE_IDS: str = ""

    class Config:
        env_prefix = "MESALINK_CLIENT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def persistent_table_ids(self) -> List[str]:
        return [item.strip() for item in self.PERSISTENT_TABLE_IDS.split(",") if item.strip()]


client_settings = ClientSettings()
