"""
Uptime Status - UptimeRobot 站点状态聚合服务

负责：
- 拉取 UptimeRobot getMonitors 数据（直连或经同源代理）
- 60s 内存缓存
- 按天聚合可用率与故障记录
- 汇总全局状态，提供 REST API 给前端
"""

__version__ = "1.0.0"
