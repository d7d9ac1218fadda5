from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar.plugins.problem_details import ProblemDetailsConfig, ProblemDetailsPlugin
from litestar.plugins.pydantic import PydanticPlugin
from litestar.plugins.structlog import StructlogPlugin
from litestar_granian import GranianPlugin

from quotakeeper.config import app as config

structlog = StructlogPlugin(config=config.log)
alchemy = SQLAlchemyPlugin(config=config.alchemy)
granian = GranianPlugin()
problem_details = ProblemDetailsPlugin(ProblemDetailsConfig())
# camelCase payloads; only takes effect when passed to the Litestar constructor
pydantic = PydanticPlugin(prefer_alias=True)
