from functools import lru_cache
from typing import Any, Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reseller.core.path_conf import BASE_PATH


class Settings(BaseSettings):
    """全局配置"""

    model_config = SettingsConfigDict(
        env_file=f'{BASE_PATH}/.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True,
    )

    # .env 当前环境
    ENVIRONMENT: Literal['dev', 'prod'] = 'dev'

    # .env 数据库
    DATABASE_TYPE: Literal['mysql', 'postgresql'] = 'postgresql'
    DATABASE_HOST: str = '127.0.0.1'
    DATABASE_PORT: int = 5432
    DATABASE_USER: str = 'postgres'
    DATABASE_PASSWORD: str = ''

    # 数据库
    DATABASE_ECHO: bool | Literal['debug'] = False
    DATABASE_SCHEMA: str = 'reseller'
    DATABASE_CHARSET: str = 'utf8mb4'

    # .env Stripe
    STRIPE_SECRET_KEY: str = ''

    # Stripe
    STRIPE_CURRENCY: str = 'usd'
    STRIPE_MAX_NETWORK_RETRIES: int = 0  # hooks are never retried automatically
    STRIPE_TIMEOUT_SECONDS: float = 20.0
    STRIPE_CIRCUIT_FAILURE_THRESHOLD: int = 5
    STRIPE_CIRCUIT_RECOVERY_SECONDS: int = 60

    # .env Submission workflow
    SUBMISSION_APPROVAL_URL: str = 'https://posts/api/campaign/workflow'
    SUBMISSION_APP_SECRET: str = ''

    # Submission workflow
    SUBMISSION_TIMEOUT_SECONDS: float = 15.0

    # Subscription policy
    SUBSCRIPTION_DEFAULT_TRIAL_DAYS: int = 10
    SUBSCRIPTION_RENEWAL_THRESHOLD_DAYS: int = 14

    # 日志
    LOG_STD_LEVEL: str = 'INFO'
    LOG_FORMAT: str = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'

    @model_validator(mode='before')
    @classmethod
    def check_env(cls, values: Any) -> Any:
        """检查环境变量"""
        if isinstance(values, dict) and values.get('ENVIRONMENT') == 'prod':
            values['DATABASE_ECHO'] = False
            values.setdefault('LOG_STD_LEVEL', 'WARNING')

        return values

    @property
    def database_url(self) -> str:
        driver = 'postgresql+asyncpg' if self.DATABASE_TYPE == 'postgresql' else 'mysql+asyncmy'
        return (
            f'{driver}://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
            f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_SCHEMA}'
        )


@lru_cache
def get_settings() -> Settings:
    """获取全局配置单例"""
    return Settings()


# 创建全局配置实例
settings = get_settings()
