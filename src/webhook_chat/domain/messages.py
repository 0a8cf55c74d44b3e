"""User-facing sentences, one catalog per supported locale."""

from __future__ import annotations

from dataclasses import dataclass

from webhook_chat.domain.models import ErrorKind


@dataclass(frozen=True)
class MessageCatalog:
    greeting: str
    empty_reply: str
    toast_title: str
    errors: dict[ErrorKind, str]

    def greet(self, first_name: str) -> str:
        return self.greeting.format(first_name=first_name)

    def for_error(self, kind: ErrorKind) -> str:
        return self.errors.get(kind, self.errors[ErrorKind.UNKNOWN])


PT_BR = MessageCatalog(
    greeting="Olá {first_name}! Como posso ajudá-lo hoje?",
    empty_reply="Desculpe, não recebi uma resposta válida.",
    toast_title="Erro",
    errors={
        ErrorKind.CONFIGURATION_MISSING: "Erro de configuração: URL do webhook não encontrada.",
        ErrorKind.METHOD_NOT_ALLOWED: (
            "Método não permitido. Verifique a configuração do webhook."
        ),
        ErrorKind.NOT_FOUND: "Endpoint não encontrado. Verifique a URL do webhook.",
        ErrorKind.CROSS_ORIGIN_REJECTED: (
            "Erro de CORS. O servidor não permite requisições desta origem."
        ),
        ErrorKind.HTTP_ERROR: "O servidor retornou um erro. Tente novamente em instantes.",
        ErrorKind.TRANSPORT_ERROR: (
            "Não foi possível conectar ao servidor. Verifique sua conexão e tente novamente."
        ),
        ErrorKind.UNKNOWN: (
            "Desculpe, ocorreu um erro ao processar sua mensagem. Tente novamente."
        ),
    },
)

EN = MessageCatalog(
    greeting="Hello {first_name}! How can I help you today?",
    empty_reply="Sorry, I did not receive a valid response.",
    toast_title="Error",
    errors={
        ErrorKind.CONFIGURATION_MISSING: "Configuration error: webhook URL not found.",
        ErrorKind.METHOD_NOT_ALLOWED: "Method not allowed. Check the webhook configuration.",
        ErrorKind.NOT_FOUND: "Endpoint not found. Check the webhook URL.",
        ErrorKind.CROSS_ORIGIN_REJECTED: (
            "CORS error. The server does not accept requests from this origin."
        ),
        ErrorKind.HTTP_ERROR: "The server returned an error. Please try again shortly.",
        ErrorKind.TRANSPORT_ERROR: (
            "Could not reach the server. Check your connection and try again."
        ),
        ErrorKind.UNKNOWN: (
            "Sorry, something went wrong while processing your message. Please try again."
        ),
    },
)

CATALOGS: dict[str, MessageCatalog] = {"pt-BR": PT_BR, "en": EN}


def get_catalog(locale: str) -> MessageCatalog:
    """Return the catalog for *locale*, falling back to pt-BR."""
    return CATALOGS.get(locale, PT_BR)
