class AppException(Exception):
    """
    Базовый класс для всех исключений приложения.
    """
    pass


# Коды возврата nmcli (man nmcli, раздел EXIT STATUS)
NMCLI_EXIT_CODES = {
    0: "success",
    1: "unknown or unspecified error",
    2: "invalid user input, wrong nmcli invocation",
    3: "timeout expired",
    4: "connection activation failed",
    5: "connection deactivation failed",
    6: "disconnecting device failed",
    7: "connection deletion failed",
    8: "NetworkManager is not running",
    10: "connection, device, or access point does not exist",
    65: "file name expected",
}


class NmcliError(AppException):
    """
    Ошибка запуска nmcli: бинарник не найден или ненулевой код возврата.
    """

    def __init__(self, command: tuple[str, ...], returncode: int | None, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            self.reason = "could not start process"
        else:
            self.reason = NMCLI_EXIT_CODES.get(returncode, "unexpected exit status")
        super().__init__(
            f"{' '.join(command)} exited with {returncode} ({self.reason}): {stderr.strip()}"
        )


class MalformedRecordError(AppException):
    """
    Строка вывода nmcli не может быть разобрана в запись точки доступа.
    """

    def __init__(self, message: str, line: str, field_count: int | None = None):
        self.line = line
        self.field_count = field_count
        super().__init__(message)


class ChannelClosed(AppException):
    """
    Канал закрыт: данных больше не будет.
    """
    pass
