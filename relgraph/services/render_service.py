# relgraph/services/render_service.py
"""관계 그래프 이미지 렌더링

Cytoscape.js 레이아웃을 헤드리스 Chromium(Playwright)에서 실행하고 캔버스를
스크린샷으로 찍는다. 라우트는 ``GraphRenderer`` 인터페이스만 알면 된다.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from relgraph.core.config import Settings
from relgraph.core.exceptions import RenderError
from relgraph.schemas.graph import GraphData

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))", re.ASCII)


def _clamp(value, minimum, maximum):
    return max(minimum, min(maximum, value))


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = _LEADING_FLOAT_RE.match(str(value))
    return float(match.group(1)) if match else None


@dataclass(frozen=True)
class RenderStyle:
    line_width: int = 7
    node_size: int = 40
    font_size: int = 10
    opacity: float = 0.6

    @classmethod
    def from_query(
        cls,
        width: Optional[str] = None,
        nodesize: Optional[str] = None,
        fontsize: Optional[str] = None,
        opacity: Optional[str] = None,
    ) -> "RenderStyle":
        """쿼리 파라미터 해석, 잘못된 값은 기본값, 범위 밖은 잘라냄"""
        line_width = _parse_int(width) or cls.line_width
        node_size = _parse_int(nodesize) or cls.node_size
        font_size = _parse_int(fontsize) or cls.font_size
        alpha = _parse_float(opacity)
        if alpha is None:
            alpha = cls.opacity

        return cls(
            line_width=_clamp(line_width, 1, 50),
            node_size=_clamp(node_size, 10, 200),
            font_size=_clamp(font_size, 6, 72),
            opacity=_clamp(alpha, 0.05, 1.0),
        )


@dataclass(frozen=True)
class RenderOutput:
    name: str
    canvas_size: int
    image_format: str  # "png" | "jpeg"
    quality: Optional[int] = None

    @property
    def extension(self) -> str:
        return "jpg" if self.image_format == "jpeg" else "png"

    @property
    def media_type(self) -> str:
        return f"image/{self.image_format}"

    @property
    def filename(self) -> str:
        return f"relationship-{self.name}.{self.extension}"


RENDER_PRESETS = {
    "custom.png": RenderOutput("custom", 2000, "png"),
    "custom.jpg": RenderOutput("custom", 2000, "jpeg", quality=85),
    "telegram.png": RenderOutput("telegram", 800, "png"),
    "telegram.jpg": RenderOutput("telegram", 800, "jpeg", quality=85),
}


class GraphRenderer(Protocol):
    async def render(self, graph: GraphData, style: RenderStyle, output: RenderOutput) -> bytes: ...


def _script_json(value) -> str:
    # <script> 안에 넣을 JSON, 태그 종료 방지
    return json.dumps(value, ensure_ascii=False).replace("<", "\\u003c")


def build_graph_html(
    graph: GraphData,
    style: RenderStyle,
    canvas_size: int,
    cytoscape_url: str,
    layout_iterations: int = 800,
    settle_fallback_ms: int = 5000,
) -> str:
    """Cytoscape 그래프 HTML 생성"""
    elements = [{"group": "nodes", "data": node.model_dump()} for node in graph.nodes]
    elements.extend(
        {
            "group": "edges",
            "data": {"id": f"edge-{edge.id}", "source": edge.from_, "target": edge.to},
        }
        for edge in graph.edges
    )

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <script src="{cytoscape_url}"></script>
    <style>
        body {{ margin: 0; padding: 0; background: #ffffff; }}
        #cy {{ width: {canvas_size}px; height: {canvas_size}px; background: #ffffff; }}
    </style>
</head>
<body>
    <div id="cy"></div>
    <script>
        function markComplete() {{ window.renderComplete = true; }}
        try {{
            const cy = cytoscape({{
                container: document.getElementById('cy'),
                elements: {_script_json(elements)},
                style: [
                    {{
                        selector: 'node',
                        style: {{
                            'background-color': '#77B55A',
                            'label': 'data(label)',
                            'text-valign': 'center',
                            'text-halign': 'center',
                            'color': 'white',
                            'text-outline-width': 2,
                            'text-outline-color': '#2d4a1f',
                            'width': {style.node_size},
                            'height': {style.node_size},
                            'font-size': {style.font_size},
                            'font-weight': 'bold',
                            'border-width': 2,
                            'border-color': '#77B55A'
                        }}
                    }},
                    {{
                        selector: 'edge',
                        style: {{
                            'width': {style.line_width},
                            'line-color': 'rgb(176, 211, 243)',
                            'curve-style': 'straight',
                            'opacity': {style.opacity}
                        }}
                    }}
                ]
            }});

            let layout;
            try {{
                layout = cy.layout({{
                    name: 'cose',
                    animate: false,
                    idealEdgeLength: 100,
                    nodeOverlap: 20,
                    fit: true,
                    padding: 50,
                    randomize: false,
                    componentSpacing: 180,
                    nodeRepulsion: 1200000,
                    edgeElasticity: 100,
                    nestingFactor: 5,
                    gravity: 60,
                    numIter: {layout_iterations},
                    initialTemp: 200,
                    coolingFactor: 0.95,
                    minTemp: 1.0
                }});
            }} catch (err) {{
                layout = cy.layout({{ name: 'circle', animate: false, fit: true, padding: 50 }});
            }}
            layout.one('layoutstop', markComplete);
            layout.run();
            setTimeout(markComplete, {settle_fallback_ms});
        }} catch (err) {{
            window.renderError = String(err);
        }}
    </script>
</body>
</html>"""


class PlaywrightRenderer:
    """요청마다 Chromium 하나를 띄우고 닫는 렌더러"""

    def __init__(self, settings: Settings):
        self.cytoscape_url = settings.cytoscape_url
        self.timeout_ms = settings.render_timeout_ms
        self.device_scale_factor = settings.render_device_scale_factor
        self.layout_iterations = settings.render_layout_iterations

    async def render(self, graph: GraphData, style: RenderStyle, output: RenderOutput) -> bytes:
        html = build_graph_html(
            graph,
            style,
            output.canvas_size,
            self.cytoscape_url,
            layout_iterations=self.layout_iterations,
        )
        size = output.canvas_size

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(
                    headless=True, args=["--no-sandbox", "--disable-setuid-sandbox"]
                )
                try:
                    page = await browser.new_page(
                        viewport={"width": size, "height": size},
                        device_scale_factor=self.device_scale_factor,
                    )
                    await page.set_content(html, wait_until="load")

                    # 레이아웃 완료 신호 대기
                    await page.wait_for_function(
                        "window.renderComplete === true || window.renderError !== undefined",
                        timeout=self.timeout_ms,
                    )
                    render_error = await page.evaluate("window.renderError")
                    if render_error:
                        raise RenderError(f"그래프 스크립트 오류: {render_error}")

                    screenshot_options = {
                        "type": output.image_format,
                        "clip": {"x": 0, "y": 0, "width": size, "height": size},
                    }
                    if output.quality is not None:
                        screenshot_options["quality"] = output.quality
                    image = await page.screenshot(**screenshot_options)
                finally:
                    await browser.close()

        except PlaywrightTimeoutError as e:
            logger.error("그래프 레이아웃 대기 시간 초과 (%sms): %s", self.timeout_ms, e)
            raise RenderError("그래프 레이아웃이 제한 시간 안에 끝나지 않았습니다") from e
        except PlaywrightError as e:
            logger.error("헤드리스 브라우저 오류: %s", e)
            raise RenderError("헤드리스 브라우저를 시작하지 못했습니다") from e

        logger.info(
            "그래프 이미지 생성 완료: %s (%s bytes, 노드 %s개)",
            output.filename,
            len(image),
            len(graph.nodes),
        )
        return image
