# Пакет моделей базы данных
# Здесь импортируются все модели, чтобы metadata.create_all их увидел
from .wap import Wap
from .wap_password import WapPassword
