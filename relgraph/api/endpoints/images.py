# relgraph/api/endpoints/images.py

import html
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, Response
from relgraph.core.config import Settings, get_settings
from relgraph.core.rate_limit import RateLimiter
from relgraph.services.relation_service import RelationService
from relgraph.services.render_service import (
    RENDER_PRESETS,
    GraphRenderer,
    PlaywrightRenderer,
    RenderStyle,
)
from relgraph.api.endpoints.relations import get_relation_service

router = APIRouter()

image_limit = RateLimiter("image", window_seconds=60, max_requests=10)


def get_renderer(settings: Settings = Depends(get_settings)) -> GraphRenderer:
    return PlaywrightRenderer(settings)


class ImageQuery:
    """이미지 스타일 쿼리 파라미터"""

    def __init__(
        self,
        width: Optional[str] = Query(default=None, description="선 굵기 (1~50, 기본 7)"),
        nodesize: Optional[str] = Query(default=None, description="노드 크기 (기본 40)"),
        fontsize: Optional[str] = Query(default=None, description="글자 크기 (기본 10)"),
        opacity: Optional[str] = Query(default=None, description="선 투명도 (기본 0.6)"),
    ):
        self.style = RenderStyle.from_query(width, nodesize, fontsize, opacity)


async def _render_image(
    image_name: str,
    query: ImageQuery,
    relation_service: RelationService,
    renderer: GraphRenderer,
) -> Response:
    output = RENDER_PRESETS[image_name]
    graph = await relation_service.get_graph()
    image = await renderer.render(graph, query.style, output)

    return Response(
        content=image,
        media_type=output.media_type,
        headers={
            "Content-Disposition": f'inline; filename="{output.filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.get("/custom.png", summary="관계 그래프 PNG (2000px)", dependencies=[Depends(image_limit)])
async def custom_png(
    query: ImageQuery = Depends(),
    relation_service: RelationService = Depends(get_relation_service),
    renderer: GraphRenderer = Depends(get_renderer),
):
    return await _render_image("custom.png", query, relation_service, renderer)


@router.get("/custom.jpg", summary="관계 그래프 JPEG (2000px)", dependencies=[Depends(image_limit)])
async def custom_jpg(
    query: ImageQuery = Depends(),
    relation_service: RelationService = Depends(get_relation_service),
    renderer: GraphRenderer = Depends(get_renderer),
):
    return await _render_image("custom.jpg", query, relation_service, renderer)


@router.get("/telegram.png", summary="관계 그래프 PNG (800px)", dependencies=[Depends(image_limit)])
async def telegram_png(
    query: ImageQuery = Depends(),
    relation_service: RelationService = Depends(get_relation_service),
    renderer: GraphRenderer = Depends(get_renderer),
):
    return await _render_image("telegram.png", query, relation_service, renderer)


@router.get("/telegram.jpg", summary="관계 그래프 JPEG (800px)", dependencies=[Depends(image_limit)])
async def telegram_jpg(
    query: ImageQuery = Depends(),
    relation_service: RelationService = Depends(get_relation_service),
    renderer: GraphRenderer = Depends(get_renderer),
):
    return await _render_image("telegram.jpg", query, relation_service, renderer)


SHARE_TITLE = "인물 관계도"
SHARE_DESCRIPTION = "실시간으로 생성되는 인물 관계 그래프"
SHARE_IMAGE_PATH = "/telegram.png"
SHARE_REFRESH_MS = 30000


def build_share_page(base_url: str) -> str:
    """미리보기 메타 태그와 자동 새로고침 이미지를 담은 공유 페이지"""
    base_url = html.escape(base_url.rstrip("/"), quote=True)
    image_url = f"{base_url}{SHARE_IMAGE_PATH}"

    return f"""<!DOCTYPE html>
<html lang="ko">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{SHARE_TITLE}</title>
    <meta property="og:title" content="{SHARE_TITLE}">
    <meta property="og:description" content="{SHARE_DESCRIPTION}">
    <meta property="og:image" content="{image_url}">
    <meta property="og:type" content="website">
    <meta property="og:url" content="{base_url}/graph">
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:title" content="{SHARE_TITLE}">
    <meta name="twitter:description" content="{SHARE_DESCRIPTION}">
    <meta name="twitter:image" content="{image_url}">
    <style>
        body {{ margin: 0; padding: 20px; background: #f5f5f5; font-family: Arial, sans-serif;
               display: flex; flex-direction: column; align-items: center; }}
        .container {{ max-width: 1200px; background: white; border-radius: 10px; padding: 20px;
                     box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1); text-align: center; }}
        .graph-image {{ max-width: 100%; height: auto; border: 1px solid #ddd; border-radius: 8px; }}
        .refresh-btn {{ margin-top: 20px; padding: 10px 20px; background: #007bff; color: white;
                       border: none; border-radius: 5px; cursor: pointer; font-size: 16px; }}
        .links {{ margin-top: 20px; font-size: 14px; }}
        .links a {{ color: #007bff; text-decoration: none; margin: 0 10px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{SHARE_TITLE}</h1>
        <p>{SHARE_DESCRIPTION}</p>
        <img class="graph-image" src="{SHARE_IMAGE_PATH}" alt="{SHARE_TITLE}" onclick="refreshImage()">
        <button class="refresh-btn" onclick="refreshImage()">이미지 새로 만들기</button>
        <div class="links">
            <a href="/custom.png" target="_blank">고해상도 이미지</a>
            <a href="/api/graph" target="_blank">그래프 데이터</a>
        </div>
    </div>
    <script>
        function refreshImage() {{
            const img = document.querySelector('.graph-image');
            img.src = '{SHARE_IMAGE_PATH}?' + new Date().getTime();
        }}
        setInterval(refreshImage, {SHARE_REFRESH_MS});
    </script>
</body>
</html>"""


@router.get("/graph", response_class=HTMLResponse, summary="관계 그래프 공유 페이지")
async def share_page(request: Request):
    """메신저 미리보기용 페이지, 이미지는 30초마다 새로 요청"""
    return HTMLResponse(build_share_page(str(request.base_url)))
