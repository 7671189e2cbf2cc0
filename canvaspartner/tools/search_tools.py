"""Read-only tools: web search and the user's location."""

from pydantic import BaseModel, Field

from canvaspartner.canvas.models import GeoPoint
from canvaspartner.providers.search.base import SearchProvider
from canvaspartner.tools.models import (
    ToolContext,
    ToolName,
    ToolResult,
    ToolSpec,
    ToolStatus,
)


class SearchWebArgs(BaseModel):
    query: str = Field(
        ...,
        min_length=3,
        description="Search query, be specific for better results",
    )


class GetUserLocationArgs(BaseModel):
    pass


def build_search_tools(provider: SearchProvider) -> list[ToolSpec]:
    async def search_web(args: SearchWebArgs, ctx: ToolContext) -> ToolResult:
        response = await provider.search(args.query)

        if response.status != "success":
            return ToolResult.failed(response.message or "Web search failed")
        if not response.results:
            return ToolResult(
                status=ToolStatus.NOT_FOUND,
                message=f"No results for: {response.query}",
            )
        return ToolResult(
            status=ToolStatus.SUCCESS,
            message=f"{len(response.results)} results",
            data={
                "query": response.query,
                "results": [result.model_dump() for result in response.results],
            },
        )

    return [
        ToolSpec(
            name=ToolName.SEARCH_WEB,
            description=(
                "Search the web for market research, competitor analysis, "
                "industry data or other facts that inform the business plan."
            ),
            input_model=SearchWebArgs,
            handler=search_web,
        )
    ]


def build_location_tools(default_location: GeoPoint) -> list[ToolSpec]:
    async def get_user_location(args: GetUserLocationArgs, ctx: ToolContext) -> ToolResult:
        location = ctx.location or default_location
        return ToolResult(
            status=ToolStatus.SUCCESS,
            data={
                "lat": location.lat,
                "lon": location.lon,
                "source": "user" if ctx.location else "default",
            },
        )

    return [
        ToolSpec(
            name=ToolName.GET_USER_LOCATION,
            description=(
                "Get the user's coordinates. Optional, use it when location "
                "matters for the canvas."
            ),
            input_model=GetUserLocationArgs,
            handler=get_user_location,
        )
    ]
