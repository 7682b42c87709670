# -*- coding: utf-8 -*-
"""
报告模块
"""

import csv
import html
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .config import ScanConfig
from .errors import ConfigurationError
from .models import ProbeResult

FORMAT_SUFFIXES = {
    'json': '.json',
    'csv': '.csv',
    'html': '.html',
    'plain': '.txt',
    'simple': '.txt',
}


class ReportGenerator:
    """报告生成器"""

    def __init__(self, config: Optional[ScanConfig] = None):
        self.config = config or ScanConfig()

    def save_results(self, results: List[ProbeResult], output_file: str,
                     stats: Optional[Dict] = None, report_format: Optional[str] = None) -> str:
        """按配置的格式保存报告，返回实际写入的文件路径"""
        report_format = (report_format or self.config.output.report_format or 'plain').lower()
        if report_format not in FORMAT_SUFFIXES:
            raise ConfigurationError(f"不支持的报告格式: {report_format}")
        suffix = FORMAT_SUFFIXES[report_format]
        if not output_file.endswith(suffix):
            output_file += suffix
        Path(output_file).parent.mkdir(parents=True, exist_ok=True)
        writer = getattr(self, f'generate_{report_format}_report')
        writer(results, stats or {}, output_file)
        return output_file

    def generate_json_report(self, results: List[ProbeResult], stats: Dict, output_file: str):
        """生成JSON格式报告"""
        report = {
            'scan_info': dict(stats, generated=datetime.now().isoformat()),
            'results': [r.to_dict() for r in results],
        }
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)
        return report

    def generate_csv_report(self, results: List[ProbeResult], stats: Dict, output_file: str):
        """生成CSV格式报告"""
        with open(output_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['URL', 'Path', 'Status Code', 'Size', 'Title', 'Redirect',
                             'Directory', 'Recursion Level', 'Error', 'Timestamp'])
            for result in results:
                writer.writerow([
                    result.url, result.path, '' if result.status is None else result.status,
                    result.content_length, result.title, result.redirect,
                    result.is_directory, result.recursion_level, result.error or '',
                    result.timestamp.isoformat(),
                ])

    def generate_html_report(self, results: List[ProbeResult], stats: Dict, output_file: str):
        """生成HTML格式报告"""
        rows = []
        for result in results:
            rows.append(
                f'        <tr class="status-{result.status}">'
                f'<td><a href="{html.escape(result.url)}" target="_blank">{html.escape(result.url)}</a></td>'
                f'<td>{html.escape(result.path)}</td>'
                f'<td>{"" if result.status is None else result.status}</td>'
                f'<td>{result.content_length}</td>'
                f'<td>{html.escape(result.title)}</td>'
                f'<td>{html.escape(result.redirect)}</td>'
                f'<td>{html.escape(result.error or "")}</td></tr>'
            )
        content = HTML_TEMPLATE.format(
            generated=datetime.now().isoformat(timespec='seconds'),
            total=len(results),
            targets=html.escape(', '.join(stats.get('targets', []))),
            rows='\n'.join(rows),
        )
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(content)

    def generate_plain_report(self, results: List[ProbeResult], stats: Dict, output_file: str):
        """生成纯文本报告"""
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write("dirprobe 扫描报告\n")
            f.write(f"生成时间: {datetime.now().isoformat(timespec='seconds')}\n")
            f.write(f"结果总数: {len(results)}\n\n")
            for result in results:
                status = '---' if result.status is None else result.status
                f.write(f"[{status}] {result.url}\n")
                if result.title:
                    f.write(f"    Title: {result.title}\n")
                if result.redirect:
                    f.write(f"    Redirect: {result.redirect}\n")
                if result.error:
                    f.write(f"    Error: {result.error}\n")
                f.write("\n")

    def generate_simple_report(self, results: List[ProbeResult], stats: Dict, output_file: str):
        """只输出状态码和URL"""
        with open(output_file, 'w', encoding='utf-8') as f:
            for result in results:
                status = '---' if result.status is None else result.status
                f.write(f"[{status}] {result.url}\n")


HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>目录扫描报告</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; }}
        table {{ border-collapse: collapse; width: 100%; }}
        th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
        th {{ background-color: #f2f2f2; }}
        .status-200 {{ background-color: #d4edda; }}
        .status-301, .status-302 {{ background-color: #fff3cd; }}
        .status-403, .status-404 {{ background-color: #f8d7da; }}
        .status-500 {{ background-color: #f5c6cb; }}
    </style>
</head>
<body>
    <h1>目录扫描报告</h1>
    <p><strong>生成时间:</strong> {generated}</p>
    <p><strong>目标:</strong> {targets}</p>
    <p><strong>结果总数:</strong> {total}</p>
    <table>
        <tr><th>URL</th><th>路径</th><th>状态码</th><th>长度</th><th>标题</th><th>重定向</th><th>错误</th></tr>
{rows}
    </table>
</body>
</html>
"""
